"""Default values and static lookup tables shared by crawler modules."""

from __future__ import annotations

import re


DEFAULT_CONCURRENCY = 10
DEFAULT_MAX_PAGES_PER_QUERY = 1
DEFAULT_MOBILE_RESULTS = False
DEFAULT_SAVE_HTML = False

DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_RETRIES = 3
DEFAULT_RETRY_BACKOFF_SECONDS = 2.0
DEFAULT_RATE_LIMIT_SECONDS = 0.0

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)
MOBILE_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_4 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.4 Mobile/15E148 Safari/604.1"
)
DEFAULT_HTTP_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

SUPPORTED_CONFIG_SUFFIXES = (".json", ".yaml", ".yml")
JSON_INDENT = 2

GOOGLE_DEFAULT_RESULTS_PER_PAGE = 10
DEFAULT_GOOGLE_SEARCH_DOMAIN_COUNTRY_CODE = "US"
DEFAULT_GOOGLE_SEARCH_DOMAIN = "google.com"

# Matches e.g. "https://www.google.co.uk/search?q=cats"; group 3 is the domain.
GOOGLE_SEARCH_URL_REGEX = re.compile(
    r"^(http|https)://(www\.)?(google(\.[a-z]{2,3}){1,2})/search\?(.*)$",
    re.IGNORECASE,
)

GOOGLE_SEARCH_DOMAIN_TO_COUNTRY_CODE: dict[str, str] = {
    "google.com": "US",
    "google.ad": "AD",
    "google.ae": "AE",
    "google.com.af": "AF",
    "google.com.ag": "AG",
    "google.al": "AL",
    "google.am": "AM",
    "google.co.ao": "AO",
    "google.com.ar": "AR",
    "google.as": "AS",
    "google.at": "AT",
    "google.com.au": "AU",
    "google.az": "AZ",
    "google.ba": "BA",
    "google.com.bd": "BD",
    "google.be": "BE",
    "google.bg": "BG",
    "google.com.bh": "BH",
    "google.com.bo": "BO",
    "google.com.br": "BR",
    "google.by": "BY",
    "google.ca": "CA",
    "google.ch": "CH",
    "google.cl": "CL",
    "google.cn": "CN",
    "google.com.co": "CO",
    "google.co.cr": "CR",
    "google.com.cu": "CU",
    "google.com.cy": "CY",
    "google.cz": "CZ",
    "google.de": "DE",
    "google.dk": "DK",
    "google.com.do": "DO",
    "google.dz": "DZ",
    "google.com.ec": "EC",
    "google.ee": "EE",
    "google.com.eg": "EG",
    "google.es": "ES",
    "google.fi": "FI",
    "google.fr": "FR",
    "google.co.uk": "GB",
    "google.ge": "GE",
    "google.gr": "GR",
    "google.com.gt": "GT",
    "google.com.hk": "HK",
    "google.hn": "HN",
    "google.hr": "HR",
    "google.hu": "HU",
    "google.co.id": "ID",
    "google.ie": "IE",
    "google.co.il": "IL",
    "google.co.in": "IN",
    "google.iq": "IQ",
    "google.is": "IS",
    "google.it": "IT",
    "google.jo": "JO",
    "google.co.jp": "JP",
    "google.co.ke": "KE",
    "google.kz": "KZ",
    "google.co.kr": "KR",
    "google.com.kw": "KW",
    "google.com.lb": "LB",
    "google.lk": "LK",
    "google.lt": "LT",
    "google.lu": "LU",
    "google.lv": "LV",
    "google.co.ma": "MA",
    "google.md": "MD",
    "google.me": "ME",
    "google.mk": "MK",
    "google.com.mt": "MT",
    "google.com.mx": "MX",
    "google.com.my": "MY",
    "google.com.ng": "NG",
    "google.com.ni": "NI",
    "google.nl": "NL",
    "google.no": "NO",
    "google.com.np": "NP",
    "google.co.nz": "NZ",
    "google.com.om": "OM",
    "google.com.pa": "PA",
    "google.com.pe": "PE",
    "google.com.ph": "PH",
    "google.com.pk": "PK",
    "google.pl": "PL",
    "google.com.pr": "PR",
    "google.pt": "PT",
    "google.com.py": "PY",
    "google.com.qa": "QA",
    "google.ro": "RO",
    "google.rs": "RS",
    "google.ru": "RU",
    "google.com.sa": "SA",
    "google.se": "SE",
    "google.com.sg": "SG",
    "google.si": "SI",
    "google.sk": "SK",
    "google.com.sv": "SV",
    "google.co.th": "TH",
    "google.tn": "TN",
    "google.com.tr": "TR",
    "google.com.tw": "TW",
    "google.com.ua": "UA",
    "google.com.uy": "UY",
    "google.co.ve": "VE",
    "google.com.vn": "VN",
    "google.co.za": "ZA",
}

COUNTRY_CODE_TO_GOOGLE_SEARCH_DOMAIN: dict[str, str] = {
    country: domain for domain, country in GOOGLE_SEARCH_DOMAIN_TO_COUNTRY_CODE.items()
}
