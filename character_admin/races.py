# Canonical list of D&D races and their subraces (simplified)
RACES: dict[str, list[str]] = {
    "dragonborn": [],
    "dwarf": ["hill", "mountain"],
    "elf": ["high", "wood", "drow", "eladrin"],
    "gnome": ["forest", "rock"],
    "halfling": ["lightfoot", "stout"],
    "human": [],
    "tiefling": [],
    "half_orc": [],
    "half_elf": [],
    "aasimar": ["protector", "scourge", "fallen"],
    "genasi": ["air", "earth", "fire", "water"],
    "goliath": [],
    "tabaxi": [],
    "firbolg": [],
    "kenku": [],
    "tortle": [],
    "yuan_ti": [],
    "triton": [],
    "goblin": [],
    "hobgoblin": [],
    "bugbear": [],
    "kobold": [],
    "lizardfolk": [],
    "warforged": [],
    "changeling": [],
    "kalashtar": [],
    "shifter": [],
    "orc": [],
    "gith": ["githyanki", "githzerai"],
}
