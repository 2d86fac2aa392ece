"""Curated outlet table: registrable domain -> (lean, display name).

Lean assignments follow the AllSides media bias chart (Left and Lean Left
under ``left``, Center under ``center``, Lean Right and Right under
``right``). Each domain appears exactly once.
"""

from types import MappingProxyType

from perspective_lens.data import Lean

_L, _C, _R = Lean.LEFT, Lean.CENTER, Lean.RIGHT

OUTLETS: tuple[tuple[str, Lean, str], ...] = (
    # Left / Lean Left
    ("msnbc.com", _L, "MSNBC"),
    ("cnn.com", _L, "CNN"),
    ("nytimes.com", _L, "New York Times"),
    ("washingtonpost.com", _L, "Washington Post"),
    ("theguardian.com", _L, "The Guardian"),
    ("huffpost.com", _L, "HuffPost"),
    ("vox.com", _L, "Vox"),
    ("slate.com", _L, "Slate"),
    ("theatlantic.com", _L, "The Atlantic"),
    ("thedailybeast.com", _L, "The Daily Beast"),
    ("motherjones.com", _L, "Mother Jones"),
    ("thenation.com", _L, "The Nation"),
    ("jacobin.com", _L, "Jacobin"),
    ("currentaffairs.org", _L, "Current Affairs"),
    ("democracynow.org", _L, "Democracy Now"),
    ("npr.org", _L, "NPR"),
    ("nbcnews.com", _L, "NBC News"),
    ("abcnews.go.com", _L, "ABC News"),
    ("cbsnews.com", _L, "CBS News"),
    ("politico.com", _L, "Politico"),
    ("newyorker.com", _L, "The New Yorker"),
    ("time.com", _L, "TIME"),
    ("buzzfeednews.com", _L, "BuzzFeed News"),
    ("theintercept.com", _L, "The Intercept"),
    ("propublica.org", _L, "ProPublica"),
    ("salon.com", _L, "Salon"),
    ("vanityfair.com", _L, "Vanity Fair"),
    ("rollingstone.com", _L, "Rolling Stone"),
    ("esquire.com", _L, "Esquire"),
    ("gq.com", _L, "GQ"),
    ("bloomberg.com", _L, "Bloomberg"),
    ("businessinsider.com", _L, "Business Insider"),
    ("vice.com", _L, "Vice"),
    ("wired.com", _L, "Wired"),
    ("arstechnica.com", _L, "Ars Technica"),
    # Center
    ("reuters.com", _C, "Reuters"),
    ("apnews.com", _C, "AP News"),
    ("bbc.com", _C, "BBC"),
    ("bbc.co.uk", _C, "BBC"),
    ("c-span.org", _C, "C-SPAN"),
    ("allsides.com", _C, "AllSides"),
    ("thehill.com", _C, "The Hill"),
    ("axios.com", _C, "Axios"),
    ("realclearpolitics.com", _C, "RealClearPolitics"),
    ("csmonitor.com", _C, "Christian Science Monitor"),
    ("pbs.org", _C, "PBS"),
    ("usatoday.com", _C, "USA Today"),
    ("newsweek.com", _C, "Newsweek"),
    ("forbes.com", _C, "Forbes"),
    ("marketwatch.com", _C, "MarketWatch"),
    ("politifact.com", _C, "PolitiFact"),
    ("snopes.com", _C, "Snopes"),
    ("factcheck.org", _C, "FactCheck.org"),
    ("aljazeera.com", _C, "Al Jazeera"),
    ("france24.com", _C, "France 24"),
    ("dw.com", _C, "DW News"),
    ("scmp.com", _C, "South China Morning Post"),
    ("economist.com", _C, "The Economist"),
    ("ft.com", _C, "Financial Times"),
    ("barrons.com", _C, "Barron's"),
    # Right / Lean Right
    ("foxnews.com", _R, "Fox News"),
    ("nypost.com", _R, "New York Post"),
    ("breitbart.com", _R, "Breitbart"),
    ("newsmax.com", _R, "Newsmax"),
    ("oann.com", _R, "OANN"),
    ("dailywire.com", _R, "Daily Wire"),
    ("thefederalist.com", _R, "The Federalist"),
    ("dailycaller.com", _R, "Daily Caller"),
    ("theblaze.com", _R, "The Blaze"),
    ("infowars.com", _R, "InfoWars"),
    ("townhall.com", _R, "Townhall"),
    ("pjmedia.com", _R, "PJ Media"),
    ("hotair.com", _R, "Hot Air"),
    ("redstate.com", _R, "RedState"),
    ("thegatewaypundit.com", _R, "Gateway Pundit"),
    ("wsj.com", _R, "Wall Street Journal"),
    ("washingtonexaminer.com", _R, "Washington Examiner"),
    ("nationalreview.com", _R, "National Review"),
    ("washingtontimes.com", _R, "Washington Times"),
    ("freebeacon.com", _R, "Free Beacon"),
    ("foxbusiness.com", _R, "Fox Business"),
    ("reason.com", _R, "Reason"),
    ("spectator.org", _R, "The American Spectator"),
    ("americanthinker.com", _R, "American Thinker"),
    ("theepochtimes.com", _R, "The Epoch Times"),
    ("justthenews.com", _R, "Just The News"),
    ("dailymail.co.uk", _R, "Daily Mail"),
    ("heritage.org", _R, "Heritage Foundation"),
    ("aei.org", _R, "AEI"),
    ("cato.org", _R, "Cato Institute"),
)


def _build_tables(
    rows: tuple[tuple[str, Lean, str], ...],
) -> tuple[dict[str, Lean], dict[str, str]]:
    leans: dict[str, Lean] = {}
    names: dict[str, str] = {}
    for domain, lean, name in rows:
        domain = domain.lower()
        if domain in leans:
            raise ValueError(f"Duplicate outlet domain {domain!r} ({leans[domain]} and {lean})")
        leans[domain] = lean
        names[domain] = name
    return leans, names


_leans, _names = _build_tables(OUTLETS)

LEAN_BY_DOMAIN = MappingProxyType(_leans)
OUTLET_NAMES = MappingProxyType(_names)


def domains_for(lean: Lean) -> tuple[str, ...]:
    """Return the curated domains for a lean, in table order."""
    return tuple(domain for domain, row_lean in LEAN_BY_DOMAIN.items() if row_lean == lean)
