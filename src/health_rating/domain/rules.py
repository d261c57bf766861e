"""Static rule tables for the health rating engine.

Thresholds and weights are hand-tuned constants, expressed per 100g of product.
Negative guideline weights mark nutrients where less is better.
"""

from health_rating.domain.rating import CategoryProfile, IngredientRule, NutrientGuideline

NUTRIENT_GUIDELINES: tuple[NutrientGuideline, ...] = (
    NutrientGuideline(
        key="proteins_100g",
        low=5.0,
        high=20.0,
        weight=0.5,
        is_positive=True,
        bioavailability=0.9,
    ),
    NutrientGuideline(
        key="fiber_100g",
        low=3.0,
        high=6.0,
        weight=0.5,
        is_positive=True,
        bioavailability=0.8,
    ),
    NutrientGuideline(
        key="sugars_100g",
        low=5.0,
        high=22.5,
        weight=-0.6,
        is_positive=False,
        bioavailability=1.0,
    ),
    NutrientGuideline(
        key="fat_100g",
        low=3.0,
        high=17.5,
        weight=-0.3,
        is_positive=False,
        bioavailability=0.95,
    ),
    NutrientGuideline(
        key="saturated_fat_100g",
        low=1.5,
        high=5.0,
        weight=-0.5,
        is_positive=False,
        bioavailability=0.95,
    ),
    NutrientGuideline(
        key="sodium_100g",
        low=0.12,
        high=0.6,
        weight=-0.4,
        is_positive=False,
        bioavailability=0.98,
    ),
    NutrientGuideline(
        key="salt_100g",
        low=0.3,
        high=1.5,
        weight=-0.3,
        is_positive=False,
        bioavailability=0.98,
    ),
)

INGREDIENT_RULES: tuple[IngredientRule, ...] = (
    IngredientRule(
        category="artificial_colors",
        match_terms=(
            "e102",
            "e104",
            "e110",
            "e122",
            "e124",
            "e129",
            "e133",
            "tartrazine",
            "artificial color",
        ),
        weight=-0.5,
        reason="Artificial coloring",
    ),
    IngredientRule(
        category="artificial_sweeteners",
        match_terms=("aspartame", "sucralose", "acesulfame", "saccharin", "e950", "e951"),
        weight=-0.5,
        reason="Artificial sweetener",
    ),
    IngredientRule(
        category="flavor_enhancers",
        match_terms=("e621", "e622", "e623", "msg", "artificial flavor"),
        weight=-0.4,
        reason="Flavor enhancer",
    ),
    IngredientRule(
        category="preservatives",
        match_terms=(
            "preservative",
            "nitrite",
            "nitrate",
            "sulfite",
            "benzoate",
            "sorbate",
            "bha",
            "bht",
        ),
        weight=-0.3,
        reason="Added preservative",
    ),
    IngredientRule(
        category="unhealthy_fats",
        match_terms=("hydrogenated", "palm oil", "shortening", "margarine"),
        weight=-0.5,
        reason="Unhealthy fat source",
    ),
    IngredientRule(
        category="added_sugars",
        match_terms=("sugar", "syrup", "dextrose", "fructose", "maltodextrin"),
        weight=-0.3,
        reason="Added sugar",
    ),
    IngredientRule(
        category="refined_starches",
        match_terms=("modified starch", "white flour", "refined flour"),
        weight=-0.2,
        reason="Refined starch",
    ),
    IngredientRule(
        category="whole_foods",
        match_terms=(
            "whole grain",
            "whole wheat",
            "oats",
            "quinoa",
            "brown rice",
            "lentil",
            "chickpea",
        ),
        weight=0.3,
        reason="Whole food ingredient",
    ),
    IngredientRule(
        category="healthy_fats",
        match_terms=("olive oil", "avocado", "almond", "walnut", "flaxseed", "chia"),
        weight=0.3,
        reason="Source of healthy fats",
    ),
    IngredientRule(
        category="healthy_nutrients",
        match_terms=("fiber", "vitamin", "protein", "omega-3", "calcium", "iron"),
        weight=0.4,
        reason="Adds beneficial nutrients",
    ),
    IngredientRule(
        category="natural",
        match_terms=("organic", "natural", "fresh"),
        weight=0.2,
        reason="Natural ingredient",
    ),
)

# Main term -> alternative spellings and indirect names found on labels.
INGREDIENT_ALIASES: dict[str, tuple[str, ...]] = {
    "sugar": ("sucrose", "cane juice", "molasses", "honey"),
    "syrup": ("glucose-fructose", "invert"),
    "msg": ("monosodium glutamate", "glutamate", "yeast extract"),
    "fiber": ("fibre", "inulin"),
    "vitamin": ("ascorbic acid", "tocopherol", "riboflavin", "niacin", "thiamin"),
    "whole grain": ("wholegrain", "wholemeal"),
    "artificial color": ("artificial colour", "fd&c"),
    "hydrogenated": ("interesterified",),
}

# Checked in order; the first keyword found in an ingredient wins.
PROCESSING_METHODS: tuple[tuple[str, str], ...] = (
    ("raw", "raw: nutrients preserved"),
    ("roasted", "roasted: some vitamin loss"),
    ("fried", "fried: added fat"),
    ("fermented", "fermented: may aid digestion"),
    ("processed", "processed: reduced nutritional value"),
    ("refined", "refined: fiber removed"),
    ("enriched", "enriched: nutrients added back"),
    ("organic", "organic: no synthetic pesticides"),
)

CATEGORY_PROFILES: tuple[CategoryProfile, ...] = (
    CategoryProfile(
        category="beverages",
        keywords=("beverage", "drink", "juice", "soda", "lemonade", "smoothie"),
        nutritional_focus=("sugars",),
        score_adjustment=0.95,
        nutrient_multipliers={"sugars_100g": 0.5},
    ),
    CategoryProfile(
        category="dairy",
        keywords=("milk", "yogurt", "yoghurt", "cheese", "dairy", "kefir"),
        nutritional_focus=("proteins", "calcium", "saturated fat"),
        score_adjustment=1.0,
        nutrient_multipliers={"saturated_fat_100g": 1.3, "proteins_100g": 1.1},
    ),
    CategoryProfile(
        category="snacks",
        keywords=("snack", "chips", "crisps", "cookie", "biscuit", "candy", "chocolate"),
        nutritional_focus=("sugars", "fat", "sodium"),
        score_adjustment=0.9,
        nutrient_multipliers={"sugars_100g": 0.8, "fat_100g": 0.8, "sodium_100g": 0.8},
    ),
    CategoryProfile(
        category="cereals",
        keywords=("cereal", "granola", "muesli", "porridge", "bread", "pasta"),
        nutritional_focus=("fiber", "sugars"),
        score_adjustment=1.05,
        nutrient_multipliers={"fiber_100g": 1.2, "sugars_100g": 0.9},
    ),
    CategoryProfile(
        category="meat_fish",
        keywords=("meat", "chicken", "beef", "pork", "fish", "salmon", "tuna"),
        nutritional_focus=("proteins", "fat"),
        score_adjustment=1.0,
        nutrient_multipliers={"proteins_100g": 1.3, "fat_100g": 1.2},
    ),
    CategoryProfile(
        category="fruits_vegetables",
        keywords=("fruit", "vegetable", "salad", "apple", "banana", "berries", "tomato"),
        nutritional_focus=("fiber", "sugars"),
        score_adjustment=1.1,
        nutrient_multipliers={"fiber_100g": 1.1, "sugars_100g": 1.3},
    ),
    CategoryProfile(
        category="plant_protein",
        keywords=("tofu", "tempeh", "legume", "lentil", "chickpea", "plant-based", "vegan"),
        nutritional_focus=("proteins", "fiber"),
        score_adjustment=1.05,
        nutrient_multipliers={"proteins_100g": 1.1},
    ),
)
