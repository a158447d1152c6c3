"""Keyword table used to map free-text product descriptions to TTB categories."""

from typing import Dict, Tuple

from .schemas import ProductCategory

CATEGORY_KEYWORDS: Dict[ProductCategory, Tuple[str, ...]] = {
    ProductCategory.wine: (
        "wine", "cabernet", "merlot", "chardonnay", "pinot", "sauvignon",
        "riesling", "zinfandel", "syrah", "shiraz", "malbec", "tempranillo",
        "sangiovese", "nebbiolo", "grenache", "viognier", "moscato", "gewurztraminer",
        "red wine", "white wine", "rosé", "rose", "blush", "table wine",
        "champagne", "prosecco", "cava", "sparkling wine", "sparkling",
        "port", "sherry", "vermouth", "madeira", "marsala",
        "sake", "rice wine", "mead", "honey wine",
        "dessert wine", "ice wine", "fortified wine",
    ),
    ProductCategory.distilled_spirits: (
        "whiskey", "whisky", "bourbon", "scotch", "rye", "tennessee whiskey",
        "irish whiskey", "canadian whisky", "single malt", "blended whiskey",
        "vodka", "gin", "rum", "tequila", "mezcal",
        "brandy", "cognac", "armagnac", "grappa", "pisco",
        "liqueur", "cordial", "schnapps", "absinthe", "sambuca", "anisette",
        "spirit", "spirits", "distilled", "distilled spirits",
        "moonshine", "everclear", "grain alcohol", "neutral spirits",
        "ouzo", "arak", "raki", "baijiu", "soju", "shochu",
        "aquavit", "genever", "cachaca",
    ),
    ProductCategory.malt_beverage: (
        "beer", "ale", "lager", "pilsner", "pilsen",
        "ipa", "india pale ale", "pale ale", "amber ale", "brown ale",
        "stout", "porter", "wheat beer", "hefeweizen", "witbier",
        "sour", "gose", "saison", "farmhouse ale", "belgian ale",
        "kolsch", "bock", "doppelbock", "dunkel", "marzen", "oktoberfest",
        "lambic", "gueuze", "kriek", "barleywine", "barley wine",
        "dubbel", "tripel", "quad", "quadrupel",
        "malt beverage", "malt liquor", "hard seltzer", "seltzer",
        "cider", "hard cider", "perry", "pear cider",
        "flavored malt beverage", "fmb", "alcopop",
    ),
}
