"""Curated known-merchant names and the aliases they appear under in SMS bodies"""

import re
from typing import Dict, List, Optional, Pattern, Tuple

# canonical name -> lower-case aliases (the canonical name itself is always an alias)
KNOWN_MERCHANTS: Dict[str, Tuple[str, ...]] = {
    # E-commerce and retail
    "Amazon Retail": ("amazon retail", "amazon seller services", "amazon india"),
    "Amazon": ("amazon", "amzn", "amazon.in"),
    "Amazon Pay": ("amazon pay", "amazonpay", "amazon pay india"),
    "Flipkart": ("flipkart", "flipkart internet", "fkrt"),
    "Myntra": ("myntra", "myntra designs"),
    "Ajio": ("ajio",),
    "Nykaa": ("nykaa", "nykaa fashion", "fsn ecommerce"),
    "Tata Cliq": ("tata cliq", "tatacliq"),
    "Meesho": ("meesho",),
    "Snapdeal": ("snapdeal",),
    "Shopclues": ("shopclues",),
    "FirstCry": ("firstcry",),
    "Lenskart": ("lenskart",),
    "Pepperfry": ("pepperfry",),
    "Urban Ladder": ("urban ladder", "urbanladder"),
    "IKEA": ("ikea",),
    "Decathlon": ("decathlon",),
    "Croma": ("croma",),
    "Reliance Digital": ("reliance digital",),
    "Reliance Trends": ("reliance trends",),
    "Reliance Retail": ("reliance retail", "reliance smart", "reliance fresh"),
    "JioMart": ("jiomart", "jio mart"),
    "DMart": ("dmart", "d mart", "avenue supermarts"),
    "Big Bazaar": ("big bazaar", "bigbazaar"),
    "More Supermarket": ("more supermarket", "more retail"),
    "Spencer's": ("spencers", "spencer's"),
    "Star Bazaar": ("star bazaar",),
    "Lifestyle": ("lifestyle stores", "lifestyle international"),
    "Shoppers Stop": ("shoppers stop", "shoppersstop"),
    "Pantaloons": ("pantaloons",),
    "Westside": ("westside",),
    "Max Fashion": ("max fashion", "max retail"),
    "H&M": ("h&m", "hennes"),
    "Zara": ("zara",),
    "Uniqlo": ("uniqlo",),
    "Bata": ("bata",),
    "Titan": ("titan company", "titan"),
    "Tanishq": ("tanishq",),
    "Vijay Sales": ("vijay sales",),
    "Apple": ("apple.com", "apple services", "itunes"),
    "Samsung": ("samsung",),
    "Xiaomi": ("xiaomi", "mi.com"),
    "OnePlus": ("oneplus",),
    "Purplle": ("purplle",),
    "Mamaearth": ("mamaearth",),
    "Boat": ("boat lifestyle", "imagine marketing"),
    "Vishal Mega Mart": ("vishal mega mart", "vishal megamart"),
    "Ratnadeep": ("ratnadeep",),
    "Nature's Basket": ("natures basket", "nature's basket"),
    # Groceries and quick commerce
    "BigBasket": ("bigbasket", "big basket", "supermarket grocery supplies"),
    "Blinkit": ("blinkit", "grofers"),
    "Zepto": ("zepto", "kiranakart"),
    "Swiggy Instamart": ("instamart", "swiggy instamart"),
    "Dunzo": ("dunzo",),
    "Milkbasket": ("milkbasket",),
    "Country Delight": ("country delight",),
    "Licious": ("licious",),
    "FreshToHome": ("freshtohome",),
    # Food delivery and restaurants
    "Swiggy": ("swiggy", "bundl technologies"),
    "Zomato": ("zomato", "zomato media"),
    "EatSure": ("eatsure", "rebel foods"),
    "Domino's": ("dominos", "domino's", "jubilant foodworks"),
    "Pizza Hut": ("pizza hut", "pizzahut"),
    "McDonald's": ("mcdonalds", "mcdonald's", "mc donalds", "hardcastle restaurants"),
    "KFC": ("kfc",),
    "Burger King": ("burger king", "burgerking"),
    "Subway": ("subway",),
    "Starbucks": ("starbucks", "tata starbucks"),
    "Cafe Coffee Day": ("cafe coffee day", "ccd", "coffee day"),
    "Barista": ("barista",),
    "Chaayos": ("chaayos",),
    "Chai Point": ("chai point", "chaipoint"),
    "Haldiram's": ("haldiram", "haldirams", "haldiram's"),
    "Bikanervala": ("bikanervala",),
    "Wow! Momo": ("wow momo", "wow! momo"),
    "Faasos": ("faasos",),
    "Behrouz Biryani": ("behrouz",),
    "Paradise Biryani": ("paradise biryani",),
    "Barbeque Nation": ("barbeque nation", "barbeque-nation"),
    "Baskin Robbins": ("baskin robbins", "baskin"),
    "Naturals Ice Cream": ("naturals ice cream",),
    "Theobroma": ("theobroma",),
    "Dunkin'": ("dunkin",),
    "Taco Bell": ("taco bell",),
    "Box8": ("box8",),
    "FreshMenu": ("freshmenu",),
    "Magicpin": ("magicpin",),
    "EazyDiner": ("eazydiner",),
    "Dineout": ("dineout",),
    # Transport and fuel
    "Uber": ("uber", "uber india", "uber rides"),
    "Ola": ("ola", "olacabs", "ola cabs", "ani technologies"),
    "Rapido": ("rapido", "roppen transportation"),
    "BluSmart": ("blusmart",),
    "Yulu": ("yulu",),
    "Bounce": ("bounce bike", "bounce share"),
    "Namma Yatri": ("namma yatri",),
    "Meru": ("meru cabs",),
    "IRCTC": ("irctc", "indian railway"),
    "Delhi Metro": ("dmrc", "delhi metro"),
    "Mumbai Metro": ("mumbai metro",),
    "Bangalore Metro": ("bmrcl", "namma metro"),
    "FASTag": ("fastag", "netc fastag"),
    "Indian Oil": ("indian oil", "iocl", "indianoil"),
    "Bharat Petroleum": ("bharat petroleum", "bpcl"),
    "Hindustan Petroleum": ("hindustan petroleum", "hpcl"),
    "Shell": ("shell india", "shell petrol"),
    "Nayara Energy": ("nayara",),
    "Jio-bp": ("jio-bp", "jio bp"),
    "Park+": ("park+", "parkplus"),
    # Travel
    "MakeMyTrip": ("makemytrip", "make my trip", "mmt"),
    "Goibibo": ("goibibo", "ibibo"),
    "Yatra": ("yatra",),
    "Cleartrip": ("cleartrip",),
    "EaseMyTrip": ("easemytrip", "ease my trip"),
    "Ixigo": ("ixigo",),
    "RedBus": ("redbus", "red bus"),
    "AbhiBus": ("abhibus",),
    "ConfirmTkt": ("confirmtkt",),
    "IndiGo": ("indigo", "interglobe aviation"),
    "Air India": ("air india", "airindia"),
    "Vistara": ("vistara",),
    "SpiceJet": ("spicejet",),
    "Akasa Air": ("akasa",),
    "AirAsia": ("airasia", "air asia"),
    "OYO": ("oyo", "oyo rooms", "oravel stays"),
    "Airbnb": ("airbnb",),
    "Booking.com": ("booking.com",),
    "Agoda": ("agoda",),
    "Treebo": ("treebo",),
    "FabHotels": ("fabhotels",),
    "Taj Hotels": ("taj hotels", "ihcl"),
    "Zoomcar": ("zoomcar",),
    "Thomas Cook": ("thomas cook",),
    # Subscriptions and entertainment
    "Netflix": ("netflix",),
    "Amazon Prime": ("amazon prime", "prime video", "primevideo"),
    "Disney+ Hotstar": ("hotstar", "disney+ hotstar", "disney hotstar", "novi digital"),
    "JioCinema": ("jiocinema", "jio cinema"),
    "SonyLIV": ("sonyliv", "sony liv"),
    "Zee5": ("zee5",),
    "Voot": ("voot",),
    "ALTBalaji": ("altbalaji",),
    "MX Player": ("mx player",),
    "Aha": ("aha video",),
    "Spotify": ("spotify",),
    "Gaana": ("gaana",),
    "JioSaavn": ("jiosaavn", "saavn"),
    "Wynk Music": ("wynk",),
    "Apple Music": ("apple music",),
    "YouTube Premium": ("youtube premium", "youtube", "google youtube"),
    "Google Play": ("google play", "play store", "googleplay"),
    "Google One": ("google one",),
    "Microsoft": ("microsoft", "xbox"),
    "PlayStation": ("playstation", "sony interactive"),
    "Steam": ("steam games", "steampowered"),
    "BookMyShow": ("bookmyshow", "bigtree entertainment", "book my show"),
    "PVR INOX": ("pvr", "inox", "pvr inox"),
    "Cinepolis": ("cinepolis",),
    "Paytm Insider": ("paytm insider", "insider.in"),
    "Dream11": ("dream11",),
    "MPL": ("mpl", "mobile premier league"),
    "Audible": ("audible",),
    "Kindle": ("kindle",),
    "LinkedIn": ("linkedin",),
    "Coursera": ("coursera",),
    "Udemy": ("udemy",),
    "Byju's": ("byjus", "byju's", "think and learn"),
    "Unacademy": ("unacademy", "sorting hat"),
    "Cult.fit": ("cult.fit", "cultfit", "curefit"),
    "ChatGPT": ("openai", "chatgpt"),
    "Adobe": ("adobe",),
    "Zoom": ("zoom.us", "zoom video"),
    "Dropbox": ("dropbox",),
    "Canva": ("canva",),
    "Notion": ("notion labs",),
    # Telecom, utilities and bills
    "Airtel": ("airtel", "bharti airtel", "airtel payments"),
    "Jio": ("jio", "reliance jio", "jio prepaid", "jio postpaid", "jiofiber"),
    "Vodafone Idea": ("vodafone idea", "vodafone", "vi postpaid", "vi prepaid", "vodaidea"),
    "BSNL": ("bsnl",),
    "MTNL": ("mtnl",),
    "ACT Fibernet": ("act fibernet", "atria convergence"),
    "Hathway": ("hathway",),
    "Tata Play": ("tata play", "tata sky", "tatasky"),
    "Dish TV": ("dish tv", "dishtv"),
    "Sun Direct": ("sun direct",),
    "Tata Power": ("tata power",),
    "Adani Electricity": ("adani electricity", "adani power"),
    "BESCOM": ("bescom",),
    "MSEDCL": ("msedcl", "mahadiscom"),
    "BSES": ("bses",),
    "TNEB": ("tneb", "tangedco"),
    "CESC": ("cesc",),
    "Torrent Power": ("torrent power",),
    "Mahanagar Gas": ("mahanagar gas", "mgl"),
    "Indraprastha Gas": ("indraprastha gas", "igl"),
    "Gujarat Gas": ("gujarat gas",),
    "Bharat Gas": ("bharat gas", "bharatgas"),
    "HP Gas": ("hp gas", "hpgas"),
    "Indane": ("indane",),
    "Delhi Jal Board": ("delhi jal board", "djb"),
    "BWSSB": ("bwssb",),
    "LIC": ("lic of india", "life insurance corporation", "lic premium"),
    "HDFC Life": ("hdfc life",),
    "ICICI Prudential": ("icici prudential", "icici pru"),
    "SBI Life": ("sbi life",),
    "Max Life": ("max life",),
    "Star Health": ("star health",),
    "Niva Bupa": ("niva bupa", "max bupa"),
    "Care Health": ("care health", "religare health"),
    "Acko": ("acko",),
    "Digit Insurance": ("go digit", "digit insurance"),
    "PolicyBazaar": ("policybazaar", "policy bazaar"),
    "NoBroker": ("nobroker",),
    "MyGate": ("mygate",),
    "NoBrokerHood": ("nobrokerhood",),
    "Urban Company": ("urban company", "urbanclap"),
    # Healthcare and pharmacy
    "Apollo Pharmacy": ("apollo pharmacy", "apollo 247", "apollo24x7", "apollo hospitals"),
    "PharmEasy": ("pharmeasy",),
    "Netmeds": ("netmeds",),
    "1mg": ("1mg", "tata 1mg"),
    "MedPlus": ("medplus",),
    "Practo": ("practo",),
    "Dr Lal PathLabs": ("lal pathlabs", "lalpathlabs"),
    "Thyrocare": ("thyrocare",),
    "Metropolis": ("metropolis healthcare",),
    "Fortis": ("fortis",),
    "Max Healthcare": ("max healthcare", "max hospital"),
    "Manipal Hospitals": ("manipal hospital",),
    "Narayana Health": ("narayana health",),
    "Wellness Forever": ("wellness forever",),
    "HealthifyMe": ("healthifyme",),
    # Fintech, wallets and payments
    "Paytm": ("paytm", "one97", "paytm payments"),
    "PhonePe": ("phonepe", "phone pe"),
    "Google Pay": ("google pay", "gpay", "googlepay"),
    "BHIM": ("bhim",),
    "MobiKwik": ("mobikwik",),
    "Freecharge": ("freecharge",),
    "CRED": ("cred club", "dreamplug"),
    "Razorpay": ("razorpay", "razorupi"),
    "PayU": ("payu",),
    "Cashfree": ("cashfree",),
    "BillDesk": ("billdesk",),
    "CCAvenue": ("ccavenue",),
    "Juspay": ("juspay",),
    "Simpl": ("simpl", "getsimpl"),
    "LazyPay": ("lazypay",),
    "Slice": ("sliceit", "slice card"),
    "Uni Cards": ("uni cards", "uni pay"),
    "OneCard": ("onecard",),
    "Jupiter": ("jupiter money",),
    "Fi Money": ("fi money", "epifi"),
    "Zerodha": ("zerodha",),
    "Groww": ("groww", "nextbillion"),
    "Upstox": ("upstox",),
    "Angel One": ("angel one", "angel broking"),
    "Coin by Zerodha": ("coin zerodha",),
    "Kuvera": ("kuvera",),
    "INDmoney": ("indmoney",),
    "Smallcase": ("smallcase",),
    "Bajaj Finserv": ("bajaj finserv", "bajaj finance"),
    "Home Credit": ("home credit",),
    "KreditBee": ("kreditbee",),
    "MoneyView": ("moneyview", "money view"),
    "Navi": ("navi technologies", "navi finserv"),
}

_ALIASES: List[Tuple[str, str]] = sorted(
    {
        (alias, canonical)
        for canonical, aliases in KNOWN_MERCHANTS.items()
        for alias in aliases + (canonical.lower(),)
    },
    key=lambda pair: (-len(pair[0]), pair[0]),
)

# Aliases this short match only as whole words ("ola" must not hit "kolkata")
WORD_MATCH_MAX_LEN = 5


def canonical_for_alias(value: str) -> Optional[str]:
    """Canonical name when value is exactly a known alias"""
    lowered = value.strip().lower()
    for alias, canonical in _ALIASES:
        if lowered == alias:
            return canonical
    return None


_WORD_MATCHERS: Dict[str, Pattern[str]] = {
    alias: re.compile(rf"(?<![a-z0-9]){re.escape(alias)}(?![a-z0-9])")
    for alias, _ in _ALIASES
    if len(alias) <= WORD_MATCH_MAX_LEN
}


def find_known_merchant(text: str) -> Optional[str]:
    """Canonical name of the longest known alias occurring in text"""
    lowered = text.lower()
    for alias, canonical in _ALIASES:
        matcher = _WORD_MATCHERS.get(alias)
        if matcher is not None:
            if matcher.search(lowered):
                return canonical
        elif alias in lowered:
            return canonical
    return None
