"""Country -> currency and currency -> symbol tables."""

DEFAULT_CURRENCY = "USD"

COUNTRY_TO_CURRENCY: dict[str, str] = {
    # North America
    "US": "USD", "CA": "CAD", "MX": "MXN",
    # Europe
    "GB": "GBP", "DE": "EUR", "FR": "EUR", "IT": "EUR", "ES": "EUR",
    "NL": "EUR", "BE": "EUR", "AT": "EUR", "PT": "EUR", "IE": "EUR",
    "CH": "CHF", "NO": "NOK", "SE": "SEK", "DK": "DKK", "PL": "PLN",
    # Asia Pacific
    "IN": "INR", "CN": "CNY", "JP": "JPY", "KR": "KRW", "AU": "AUD",
    "NZ": "NZD", "SG": "SGD", "HK": "HKD", "TH": "THB", "MY": "MYR",
    "ID": "IDR", "PH": "PHP", "VN": "VND",
    # Middle East & Africa
    "AE": "AED", "SA": "SAR", "ZA": "ZAR", "EG": "EGP", "NG": "NGN",
    # South America
    "BR": "BRL", "AR": "ARS", "CL": "CLP", "CO": "COP",
}  # fmt: skip

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$", "EUR": "€", "GBP": "£", "JPY": "¥", "CNY": "¥",
    "INR": "₹", "KRW": "₩", "AUD": "A$", "CAD": "C$", "CHF": "Fr",
    "SEK": "kr", "NOK": "kr", "DKK": "kr", "PLN": "zł", "BRL": "R$",
    "AED": "د.إ", "SAR": "﷼", "ZAR": "R", "HKD": "HK$", "SGD": "S$",
    "THB": "฿", "MYR": "RM", "IDR": "Rp", "PHP": "₱", "VND": "₫",
    "MXN": "$", "ARS": "$", "CLP": "$", "COP": "$", "EGP": "£",
    "NGN": "₦", "NZD": "NZ$",
}  # fmt: skip


def currency_for_country(country_code: str | None) -> str:
    if not country_code:
        return DEFAULT_CURRENCY
    return COUNTRY_TO_CURRENCY.get(country_code.upper(), DEFAULT_CURRENCY)


def symbol_for_currency(currency_code: str) -> str:
    return CURRENCY_SYMBOLS.get(currency_code, currency_code)
