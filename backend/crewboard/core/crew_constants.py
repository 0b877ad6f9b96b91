# Games offered in the post form. "Other" lets the author type a custom game,
# which is stored unverified until an admin reviews it.
GAMES = [
    "League of Legends",
    "Valorant",
    "CS2",
    "Dota 2",
    "Apex Legends",
    "Overwatch 2",
    "Fortnite",
    "Call of Duty",
    "Rainbow Six Siege",
    "Rocket League",
    "Minecraft",
    "Among Us",
    "Fall Guys",
    "PUBG",
    "Warzone",
    "FIFA",
    "NBA 2K",
    "Grand Theft Auto V",
    "Rust",
    "Destiny 2",
    "World of Warcraft",
    "Final Fantasy XIV",
    "Genshin Impact",
    "Other",
]

OTHER_GAME = "Other"

PLATFORMS = [
    "PC",
    "PlayStation 5",
    "PlayStation 4",
    "Xbox Series X/S",
    "Xbox One",
    "Nintendo Switch",
    "Mobile",
    "Cross-platform",
]

# Browse filter values meaning "no filter"
ALL_GAMES = "All Games"
ALL_PLATFORMS = "All Platforms"

MIN_DESCRIPTION_LENGTH = 10
QUICK_POST_MAX_TAGS = 3
MAX_MESSAGE_LENGTH = 1000

PLACEHOLDER_NAME = "Unknown"
ANONYMOUS_AUTHOR = "Anonymous"
