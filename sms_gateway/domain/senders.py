"""Trusted sender classification for bank and payment-app SMS headers"""

import re
from typing import FrozenSet, Iterable, List

BANK_SENDER_CODES: FrozenSet[str] = frozenset(
    {
        "HDFCBK", "HDFCBN", "SBIINB", "SBIPSG", "SBMSMS", "ICICIB", "ICICIT", "AXISBK", "AXISMR",
        "KOTAKB", "KOTAK", "PNBSMS", "SCISMS", "BOIIND", "INDBNK", "CANBNK", "CENTBK", "UCOBNK",
        "UNIONB", "SYNBNK", "IDBI", "IDBIBK", "BOBSMS", "BOBTXN", "YESBNK", "IDFCFB", "IDFCBK",
        "INDUSB", "FEDBNK", "RBLBNK", "AUBANK", "CITIBK", "HSBCIN", "SCBANK", "DBSBNK", "BANDHN",
        "KVBANK", "SIBSMS", "IOBCHN", "CBSSBI", "ATMSBI",
    }
)

PAYMENT_SENDER_CODES: FrozenSet[str] = frozenset(
    {
        "GPAYBN", "GPAY", "NBLSMS", "PAYTMB", "PAYTM", "PHONPE", "PHNPE", "AMAZIN", "AMZPAY",
        "ALRTBK", "SMSIND", "MOBIKW", "CRED", "BHIM", "NPCI", "FRECHG", "JUSPAY",
    }
)

BANK_SUBSTRING_MAX_LEN = 4
PAYMENT_SUBSTRING_MAX_LEN = 5

# DLT headers arrive as "VM-HDFCBK" or "AD-ICICIB-S"
_TOKEN_SPLIT = re.compile(r"[^A-Za-z0-9]+")


def _tokens(sender: str) -> List[str]:
    return [t for t in _TOKEN_SPLIT.split(sender.upper()) if t]


def _matches_any(sender: str, codes: Iterable[str], substring_max_len: int) -> bool:
    upper = sender.upper()
    tokens = _tokens(sender)
    for code in codes:
        if code in tokens:
            return True
        # Short codes are too ambiguous for token matching but rare enough to
        # risk a plain substring hit
        if len(code) <= substring_max_len and code in upper:
            return True
    return False


class SenderClassifier:
    """Decides whether an SMS originator is a trusted financial entity"""

    def __init__(
        self,
        bank_codes: Iterable[str] = BANK_SENDER_CODES,
        payment_codes: Iterable[str] = PAYMENT_SENDER_CODES,
    ):
        self.bank_codes = frozenset(c.upper() for c in bank_codes)
        self.payment_codes = frozenset(c.upper() for c in payment_codes)

    def is_bank_sender(self, sender: str) -> bool:
        if not sender:
            return False
        return _matches_any(sender, self.bank_codes, BANK_SUBSTRING_MAX_LEN)

    def is_payment_sender(self, sender: str) -> bool:
        if not sender:
            return False
        return _matches_any(sender, self.payment_codes, PAYMENT_SUBSTRING_MAX_LEN)

    def is_trusted(self, sender: str) -> bool:
        """True when the sender belongs to a bank or a payment/UPI app"""
        return self.is_bank_sender(sender) or self.is_payment_sender(sender)
