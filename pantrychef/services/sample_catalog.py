"""Starter catalog: 20 ingredients and 3 recipes."""

SAMPLE_INGREDIENTS = [
    {"name": "Chicken Breast", "category": "Protein"},
    {"name": "Tomato", "category": "Vegetable"},
    {"name": "Onion", "category": "Vegetable"},
    {"name": "Garlic", "category": "Vegetable"},
    {"name": "Olive Oil", "category": "Oil"},
    {"name": "Salt", "category": "Seasoning"},
    {"name": "Black Pepper", "category": "Seasoning"},
    {"name": "Pasta", "category": "Grain"},
    {"name": "Rice", "category": "Grain"},
    {"name": "Eggs", "category": "Protein"},
    {"name": "Milk", "category": "Dairy"},
    {"name": "Cheese", "category": "Dairy"},
    {"name": "Bell Pepper", "category": "Vegetable"},
    {"name": "Carrot", "category": "Vegetable"},
    {"name": "Potato", "category": "Vegetable"},
    {"name": "Flour", "category": "Grain"},
    {"name": "Sugar", "category": "Sweetener"},
    {"name": "Butter", "category": "Dairy"},
    {"name": "Basil", "category": "Herb"},
    {"name": "Oregano", "category": "Herb"},
]

# components: (ingredient name, quantity, unit)
SAMPLE_RECIPES = [
    {
        "title": "Classic Chicken Pasta",
        "description": "A delicious pasta dish with tender chicken and vegetables",
        "instructions": "Cook pasta. Sauté chicken with vegetables. Mix together with olive oil and herbs.",
        "prep_time": 15,
        "cook_time": 25,
        "servings": 4,
        "image_url": "https://images.unsplash.com/photo-1621996346565-e3dbc646d9a9",
        "components": [
            ("Chicken Breast", 2, "pieces"),
            ("Pasta", 300, "grams"),
            ("Tomato", 3, "pieces"),
            ("Onion", 1, "piece"),
            ("Garlic", 3, "cloves"),
            ("Olive Oil", 2, "tbsp"),
            ("Salt", 1, "tsp"),
            ("Black Pepper", 0.5, "tsp"),
            ("Basil", 5, "leaves"),
        ],
    },
    {
        "title": "Vegetable Stir Fry",
        "description": "Healthy and colorful vegetable medley",
        "instructions": "Chop all vegetables. Heat oil in wok. Stir fry vegetables with garlic and seasonings.",
        "prep_time": 10,
        "cook_time": 15,
        "servings": 3,
        "image_url": "https://images.unsplash.com/photo-1512058564366-18510be2db19",
        "components": [
            ("Bell Pepper", 2, "pieces"),
            ("Carrot", 2, "pieces"),
            ("Onion", 1, "piece"),
            ("Garlic", 2, "cloves"),
            ("Olive Oil", 2, "tbsp"),
            ("Salt", 1, "tsp"),
            ("Black Pepper", 0.5, "tsp"),
        ],
    },
    {
        "title": "Cheese Omelette",
        "description": "Fluffy eggs with melted cheese",
        "instructions": "Beat eggs. Pour into heated pan. Add cheese and fold.",
        "prep_time": 5,
        "cook_time": 10,
        "servings": 2,
        "image_url": "https://images.unsplash.com/photo-1525351484163-7529414344d8",
        "components": [
            ("Eggs", 3, "pieces"),
            ("Cheese", 50, "grams"),
            ("Milk", 50, "ml"),
            ("Butter", 1, "tbsp"),
            ("Salt", 0.5, "tsp"),
            ("Black Pepper", 0.25, "tsp"),
        ],
    },
]
