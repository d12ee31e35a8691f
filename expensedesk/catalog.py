"""
Expense category catalogue.
"""
from __future__ import annotations

CATEGORIES: dict[str, list[str]] = {
    "Travel": ["Airfare", "Hotel", "Car Rental", "Meals", "Other"],
    "Office": ["Supplies", "Equipment", "Software", "Other"],
    "Training": ["Conference", "Course", "Books", "Other"],
    "Entertainment": ["Client", "Team", "Other"],
    "Transportation": ["Taxi", "Parking", "Gas", "Other"],
}


def subcategories_for(category: str) -> list[str]:
    return CATEGORIES.get(category, [])


def is_valid_subcategory(category: str, subcategory: str) -> bool:
    return subcategory in subcategories_for(category)
