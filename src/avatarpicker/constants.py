"""Shared constants for the avatar picker engine."""

# Catalog document file name
CONFIG_FILENAME = "data.json"

# Catalog categories
BODY_CATEGORY = "body"
ITEM_CATEGORY = "item"
SKIN_CATEGORY = "skin"

# Skin texture slots; each names the body material the texture is applied to
SKIN_SLOTS = ("lower", "upper", "head")

# Material that carries the active skin's inventory data
SKIN_INV_SLOT = "lower"

# Item locations that must be covered before the avatar is complete
DEFAULT_REQUIRED_LOCATIONS = ("lower", "upper")

# Body name derived from the sex / body number / head number selection
BODY_NAME_PATTERN = "{sex}_body_{body}_head_{head}"


def body_name_for(sex: str, body_number, head_number) -> str:
    """Return the catalog body name for a sex/body/head combination."""
    return BODY_NAME_PATTERN.format(sex=sex, body=body_number, head=head_number)
