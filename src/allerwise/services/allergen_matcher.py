"""Match a user's allergen profile against OpenFoodFacts product data."""

from datetime import UTC, datetime

from allerwise.domain.allergens import AllergenVerdict
from allerwise.domain.scans import ProductScanResult

ALLERGEN_SYNONYMS: dict[str, tuple[str, ...]] = {
    "milk": ("dairy", "lactose", "casein", "whey"),
    "eggs": ("egg",),
    "peanuts": ("peanut", "groundnut"),
    "tree nuts": (
        "nuts",
        "almonds",
        "walnuts",
        "hazelnuts",
        "cashews",
        "pistachios",
        "pecans",
    ),
    "wheat": ("gluten",),
    "soya": ("soy", "soybean"),
    "fish": ("seafood",),
    "crustaceans": ("shellfish", "shrimp", "crab", "lobster"),
    "molluscs": ("mussels", "oysters", "clams", "squid"),
}


def clean_allergen_tag(tag: str) -> str:
    """Strip a language prefix such as ``en:`` from an allergen tag."""
    if ":" in tag:
        return tag.rsplit(":", maxsplit=1)[-1].strip()
    return tag.strip()


def clean_allergen_tags(tags: list[str] | None) -> list[str]:
    """Clean a list of tags, dropping entries that end up empty."""
    cleaned = (clean_allergen_tag(str(tag)) for tag in tags or [])
    return [tag for tag in cleaned if tag]


def is_allergen_match(user_allergen: str, product_allergen: str) -> bool:
    """Return True when two allergen labels refer to the same allergen.

    Labels are compared case-insensitively. Besides exact equality, a product
    label listed as a synonym of the user's allergen matches, and so does the
    reverse: a user label listed as a synonym of the product's allergen.
    """
    user = user_allergen.strip().lower()
    product = product_allergen.strip().lower()
    if user == product:
        return True
    if product in ALLERGEN_SYNONYMS.get(user, ()):
        return True
    return user in ALLERGEN_SYNONYMS.get(product, ())


def find_matched_allergens(
    user_allergens: list[str],
    product_allergens: list[str],
    product_traces: list[str],
    ingredients: list[str],
) -> list[str]:
    """Return the user's allergens found in the product, in profile order."""
    matched: list[str] = []
    for user_allergen in user_allergens:
        needle = user_allergen.strip().lower()
        if not needle or user_allergen in matched:
            continue
        declared = any(
            is_allergen_match(needle, tag) for tag in product_allergens
        ) or any(is_allergen_match(needle, tag) for tag in product_traces)
        in_ingredients = any(needle in text.lower() for text in ingredients)
        if declared or in_ingredients:
            matched.append(user_allergen)
    return matched


def verdict_for(matched_allergens: list[str]) -> AllergenVerdict:
    """Return the verdict for a successful lookup."""
    return AllergenVerdict.RISKY if matched_allergens else AllergenVerdict.SAFE


def scan_result_from_product(
    barcode: str, product: dict[str, object], user_allergens: list[str]
) -> ProductScanResult:
    """Build a scan result from an OpenFoodFacts ``product`` object."""
    ingredients_text = product.get("ingredients_text") or ""
    ingredients = [str(ingredients_text)] if ingredients_text else []
    allergens = clean_allergen_tags(product.get("allergens_tags"))
    traces = clean_allergen_tags(product.get("traces_tags"))
    matched = find_matched_allergens(
        user_allergens=user_allergens,
        product_allergens=allergens,
        product_traces=traces,
        ingredients=ingredients,
    )
    return ProductScanResult(
        barcode=barcode,
        product_name=product.get("product_name"),
        image_url=product.get("image_url"),
        ingredients=ingredients,
        allergens=allergens,
        traces=traces,
        is_successful=True,
        verdict=verdict_for(matched),
        matched_allergens=matched,
        scanned_at=datetime.now(tz=UTC),
    )


def failed_scan_result(barcode: str, error_message: str) -> ProductScanResult:
    """Build the result returned when a lookup could not be completed."""
    return ProductScanResult(
        barcode=barcode,
        is_successful=False,
        error_message=error_message,
        verdict=AllergenVerdict.UNKNOWN,
        scanned_at=datetime.now(tz=UTC),
    )
