"""
Purpose: Guardrails for user queries before they are embedded or sent to a
language model.
Content: predictable, non-raising clean-up; oversize queries are clipped and
obvious PII is redacted before it leaves the process.
"""

import re

EMAIL = re.compile(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.I)
PHONE = re.compile(r"\+?\d[\d\s().-]{7,}\d")
CCARD = re.compile(r"\b(?:\d[ -]*?){13,19}\b")
SSN = re.compile(r"\b\d{3}-\d{2}-\d{4}\b")

MAX_QUERY_CHARS = 2000


class DefaultSecurity:
    def sanitize_for_prompt(self, text: str) -> str:
        t = (text or "").replace("\x00", "")
        t = " ".join(t.split())
        if len(t) > MAX_QUERY_CHARS:
            t = t[:MAX_QUERY_CHARS].rstrip()
        return t

    def redact_pii(self, text: str):
        found = []

        def _redact(rx, label):
            nonlocal text, found
            if rx.search(text):
                found.append(label)
                text = rx.sub(f"[{label}]", text)

        _redact(EMAIL, "EMAIL")
        _redact(SSN, "SSN")
        _redact(CCARD, "CARD")
        _redact(PHONE, "PHONE")
        return text, found
