"""Static currency code -> display symbol table.

Codes match the set offered by the remote conversion endpoint. Symbols are
display-only; codes without a distinct symbol repeat the code.
"""

from typing import Dict, List

CURRENCY_SYMBOLS: Dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "INR": "₹",
    "AED": "د.إ",
    "AFN": "؋",
    "ALL": "L",
    "AMD": "֏",
    "ANG": "ƒ",
    "AOA": "Kz",
    "ARS": "$",
    "AUD": "A$",
    "AWG": "ƒ",
    "AZN": "₼",
    "BAM": "KM",
    "BBD": "Bds$",
    "BDT": "৳",
    "BGN": "лв",
    "BHD": ".د.ب",
    "BIF": "FBu",
    "BMD": "$",
    "BND": "B$",
    "BOB": "Bs.",
    "BRL": "R$",
    "BSD": "B$",
    "BTN": "Nu.",
    "BWP": "P",
    "BYN": "Br",
    "BZD": "BZ$",
    "CAD": "C$",
    "CDF": "FC",
    "CHF": "CHF",
    "CLP": "$",
    "CNY": "¥",
    "COP": "$",
    "CRC": "₡",
    "CUP": "$",
    "CVE": "$",
    "CZK": "Kč",
    "DJF": "Fdj",
    "DKK": "kr",
    "DOP": "RD$",
    "DZD": "دج",
    "EGP": "E£",
    "ERN": "Nfk",
    "ETB": "Br",
    "FJD": "FJ$",
    "FKP": "£",
    "FOK": "kr",
    "GEL": "₾",
    "GGP": "£",
    "GHS": "₵",
    "GIP": "£",
    "GMD": "D",
    "GNF": "FG",
    "GTQ": "Q",
    "GYD": "G$",
    "HKD": "HK$",
    "HNL": "L",
    "HRK": "kn",
    "HTG": "G",
    "HUF": "Ft",
    "IDR": "Rp",
    "ILS": "₪",
    "IMP": "£",
    "IQD": "ع.د",
    "IRR": "﷼",
    "ISK": "kr",
    "JEP": "£",
    "JMD": "J$",
    "JOD": "د.ا",
    "KES": "KSh",
    "KGS": "с",
    "KHR": "៛",
    "KMF": "CF",
    "KRW": "₩",
    "KWD": "د.ك",
    "KYD": "CI$",
    "KZT": "₸",
    "LAK": "₭",
    "LBP": "ل.ل",
    "LKR": "Rs",
    "LRD": "L$",
    "LSL": "L",
    "LYD": "ل.د",
    "MAD": "د.م.",
    "MDL": "L",
    "MGA": "Ar",
    "MKD": "ден",
    "MMK": "K",
    "MNT": "₮",
    "MOP": "MOP$",
    "MRU": "UM",
    "MUR": "₨",
    "MVR": "Rf",
    "MWK": "MK",
    "MXN": "Mex$",
    "MYR": "RM",
    "MZN": "MT",
    "NAD": "N$",
    "NGN": "₦",
    "NIO": "C$",
    "NOK": "kr",
    "NPR": "रू",
    "NZD": "NZ$",
    "OMR": "ر.ع.",
    "PAB": "B/.",
    "PEN": "S/",
    "PGK": "K",
    "PHP": "₱",
    "PKR": "₨",
    "PLN": "zł",
    "PYG": "₲",
    "QAR": "ر.ق",
    "RON": "lei",
    "RSD": "дин",
    "RUB": "₽",
    "RWF": "FRw",
    "SAR": "ر.س",
    "SBD": "SI$",
    "SCR": "₨",
    "SDG": "ج.س.",
    "SEK": "kr",
    "SGD": "S$",
    "SHP": "£",
    "SLE": "Le",
    "SLL": "Le",
    "SOS": "Sh",
    "SRD": "$",
    "SSP": "£",
    "STN": "Db",
    "SYP": "£S",
    "SZL": "E",
    "THB": "฿",
    "TJS": "SM",
    "TMT": "m",
    "TND": "د.ت",
    "TOP": "T$",
    "TRY": "₺",
    "TTD": "TT$",
    "TWD": "NT$",
    "TZS": "TSh",
    "UAH": "₴",
    "UGX": "USh",
    "UYU": "$U",
    "UZS": "soʻm",
    "VES": "Bs.S",
    "VND": "₫",
    "VUV": "VT",
    "WST": "WS$",
    "XAF": "FCFA",
    "XCD": "EC$",
    "XOF": "CFA",
    "XPF": "₣",
    "YER": "﷼",
    "ZAR": "R",
    "ZMW": "ZK",
    "ZWL": "Z$",
}

# Selector order: the common five first, then alphabetical.
SUPPORTED_CURRENCIES: List[str] = list(CURRENCY_SYMBOLS)


def get_currency_symbol(currency: str) -> str:
    code = currency.upper()
    return CURRENCY_SYMBOLS.get(code, code)


def is_supported_currency(currency: str) -> bool:
    return currency.upper() in CURRENCY_SYMBOLS
