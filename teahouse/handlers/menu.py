"""Static tea collection served by the example handler."""

from pydantic import BaseModel

GREEN_TEA = "Green Tea"
BLACK_TEA = "Black Tea"
OOLONG_TEA = "Oolong Tea"
WHITE_TEA = "White Tea"

TEA_TYPES = [GREEN_TEA, BLACK_TEA, OOLONG_TEA, WHITE_TEA]


class Tea(BaseModel):
    """One entry of the tea menu."""

    name: str
    type: str
    origin: str
    caffeine: str
    flavor: str
    temperature: int  # Fahrenheit
    steepTime: str
    description: str
    price: float


TEA_MENU: dict[str, Tea] = {
    "dragonwell": Tea(
        name="Dragonwell",
        type=GREEN_TEA,
        origin="China",
        caffeine="Medium",
        flavor="Delicate, sweet, nutty",
        temperature=175,
        steepTime="2-3 minutes",
        description="A classic Chinese green tea with a smooth, mellow flavor and beautiful flat leaves.",
        price=8.50,
    ),
    "earl-grey": Tea(
        name="Earl Grey",
        type=BLACK_TEA,
        origin="England",
        caffeine="High",
        flavor="Citrusy, bergamot, bold",
        temperature=212,
        steepTime="3-5 minutes",
        description="A traditional English black tea infused with bergamot oil for a distinctive citrus aroma.",
        price=7.00,
    ),
    "da-hong-pao": Tea(
        name="Da Hong Pao",
        type=OOLONG_TEA,
        origin="China",
        caffeine="Medium",
        flavor="Complex, roasted, fruity",
        temperature=200,
        steepTime="1-2 minutes",
        description="A legendary Chinese oolong with a rich, complex flavor and beautiful amber liquor.",
        price=15.00,
    ),
    "white-peony": Tea(
        name="White Peony",
        type=WHITE_TEA,
        origin="China",
        caffeine="Low",
        flavor="Subtle, floral, sweet",
        temperature=185,
        steepTime="4-6 minutes",
        description="A delicate white tea with silvery buds and a light, refreshing taste.",
        price=12.00,
    ),
    "gyokuro": Tea(
        name="Gyokuro",
        type=GREEN_TEA,
        origin="Japan",
        caffeine="High",
        flavor="Umami, sweet, vegetal",
        temperature=140,
        steepTime="1-2 minutes",
        description="Premium Japanese green tea grown in shade, producing a rich umami flavor.",
        price=18.00,
    ),
    "assam": Tea(
        name="Assam",
        type=BLACK_TEA,
        origin="India",
        caffeine="High",
        flavor="Malty, robust, brisk",
        temperature=212,
        steepTime="3-5 minutes",
        description="A full-bodied Indian black tea perfect for breakfast and pairs well with milk.",
        price=6.50,
    ),
    "tie-guan-yin": Tea(
        name="Tie Guan Yin",
        type=OOLONG_TEA,
        origin="China",
        caffeine="Medium",
        flavor="Floral, orchid-like, smooth",
        temperature=195,
        steepTime="1-3 minutes",
        description="Iron Goddess of Mercy - a premium Chinese oolong with floral notes and lasting sweetness.",
        price=13.50,
    ),
    "silver-needle": Tea(
        name="Silver Needle",
        type=WHITE_TEA,
        origin="China",
        caffeine="Very Low",
        flavor="Delicate, honey, fresh",
        temperature=175,
        steepTime="5-7 minutes",
        description="The most prized white tea made from young buds, offering exceptional delicacy and sweetness.",
        price=22.00,
    ),
}

FOOD_PAIRINGS = {
    GREEN_TEA: "Light appetizers, sushi, steamed vegetables, mild cheeses, fruit tarts",
    BLACK_TEA: "Breakfast pastries, chocolate desserts, hearty sandwiches, aged cheeses, spiced foods",
    OOLONG_TEA: "Roasted nuts, grilled seafood, dim sum, stone fruits, semi-hard cheeses",
    WHITE_TEA: "Fresh fruits, light salads, delicate pastries, soft cheeses, cucumber sandwiches",
}
DEFAULT_PAIRING = "Light snacks and mild flavors that won't overpower the tea"

MOOD_RECOMMENDATIONS = {
    "energizing": "- Gyokuro (high caffeine, umami flavor)\n- Assam (robust, perfect morning tea)\n",
    "relaxing": "- White Peony (low caffeine, delicate)\n- Silver Needle (very low caffeine, honey notes)\n",
    "focus": "- Earl Grey (bergamot aids concentration)\n- Da Hong Pao (complex flavors for mindful drinking)\n",
}

CAFFEINE_RECOMMENDATIONS = {
    "high": "- Gyokuro, Earl Grey, Assam\n",
    "medium": "- Dragonwell, Da Hong Pao, Tie Guan Yin\n",
    "low": "- White Peony\n",
    "none": "- Silver Needle\n",
    "very low": "- Silver Needle\n",
}

FLAVOR_RECOMMENDATIONS = {
    "floral": "- Tie Guan Yin (orchid-like), White Peony (subtle floral)\n",
    "robust": "- Assam (malty), Earl Grey (bold bergamot)\n",
    "delicate": "- Silver Needle (honey sweetness), Dragonwell (gentle nuttiness)\n",
    "complex": "- Da Hong Pao (roasted, fruity), Gyokuro (umami depth)\n",
}


def get_tea(key: str) -> Tea | None:
    """Look up a tea by its menu key (e.g. 'earl-grey')."""
    return TEA_MENU.get(key)


def teas_by_type(tea_type: str) -> list[Tea]:
    """All teas of the given type, in menu order."""
    return [tea for tea in TEA_MENU.values() if tea.type == tea_type]
