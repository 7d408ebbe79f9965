"""
Suggested category catalogue.

Free-form categories are allowed everywhere; this list only feeds
suggestions and the import warnings for labels nobody has seen before.
Expense categories use the "Group: Sub" form.
"""

from moni.models.finance import CategoryLabel, TransactionType


INCOME_CATEGORIES = (
    "Salary",
    "Freelance / Fees",
    "Sales",
    "Investments / Dividends",
    "Gifts Received",
    "Refunds",
    "Rentals (Collected)",
    "Pension / Retirement",
    "Bonuses / Prizes",
    "Other Income",
)

EXPENSE_CATEGORIES = (
    # Housing
    "Housing: Rent",
    "Housing: Mortgage",
    "Housing: Building Fees",
    "Housing: Repairs and Maintenance",
    "Housing: Furniture and Decor",

    # Utilities
    "Utilities: Electricity",
    "Utilities: Water",
    "Utilities: Gas",
    "Utilities: Internet / Wifi",
    "Utilities: Mobile Phone",
    "Utilities: Cleaning",

    # Food
    "Food: Groceries",
    "Food: Restaurants",
    "Food: Fast Food / Delivery",
    "Food: Coffee and Snacks",
    "Food: Drinks / Alcohol",

    # Transport
    "Transport: Fuel",
    "Transport: Public Transport",
    "Transport: Taxi / Ride Apps",
    "Transport: Vehicle Maintenance",
    "Transport: Vehicle Insurance",
    "Transport: Parking / Tolls",

    # Health
    "Health: Doctor Visits",
    "Health: Pharmacy",
    "Health: Dentist",
    "Health: Health Insurance",
    "Health: Gym / Sports",
    "Health: Therapy",

    # Leisure
    "Leisure: Cinema / Theatre",
    "Leisure: Streaming",
    "Leisure: Video Games",
    "Leisure: Books / Magazines",
    "Leisure: Nights Out",
    "Leisure: Hobbies",

    # Education
    "Education: Tuition",
    "Education: Online Courses",
    "Education: School Supplies",
    "Education: Educational Software",

    # Personal
    "Personal: Clothing and Shoes",
    "Personal: Hairdresser",
    "Personal: Personal Care",
    "Personal: Accessories",

    # Technology
    "Technology: Hardware",
    "Technology: Software / Apps",
    "Technology: Electronic Accessories",

    # Finance
    "Finance: Debt Payments",
    "Finance: Credit Card",
    "Finance: Investments",
    "Finance: Savings",
    "Finance: Taxes",
    "Finance: Bank Fees",
    "Finance: Insurance (Life, Home)",

    # Pets
    "Pets: Food",
    "Pets: Vet",
    "Pets: Toys / Accessories",

    # Other
    "Gifts: Birthdays / Events",
    "Gifts: Donations / Charity",
    "Travel: Flights / Tickets",
    "Travel: Lodging",
    "Other: Miscellaneous",
)


def known_groups(kind: TransactionType) -> frozenset[str]:
    """Top-level groups in the catalogue for one transaction type."""
    source = INCOME_CATEGORIES if kind == TransactionType.INCOME else EXPENSE_CATEGORIES
    return frozenset(CategoryLabel.parse(raw).group for raw in source)


def is_known_category(label: CategoryLabel, kind: TransactionType) -> bool:
    """True if the label's group appears in the catalogue for `kind`."""
    return label.group in known_groups(kind)
