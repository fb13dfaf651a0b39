SAMPLE_GAMES = [
    {
        "id": "zelda-1986",
        "title": "The Legend of Zelda",
        "year": 1986,
        "platforms": ["NES"],
        "genres": ["Action", "Adventure", "RPG"],
        "tags": ["exploration", "open world", "combat", "puzzles", "boss battles"],
    },
    {
        "id": "metroid-1986",
        "title": "Metroid",
        "year": 1986,
        "platforms": ["NES"],
        "genres": ["Action", "Platform", "Adventure"],
        "tags": ["exploration", "platform jumping", "collectibles", "boss battles"],
    },
    {
        "id": "final-fantasy-1987",
        "title": "Final Fantasy",
        "year": 1987,
        "platforms": ["NES"],
        "genres": ["RPG"],
        "tags": ["turn-based", "leveling", "exploration"],
    },
    {
        "id": "tetris-1984",
        "title": "Tetris",
        "year": 1984,
        "platforms": ["Game Boy"],
        "genres": ["Puzzle"],
        "tags": ["time pressure", "real-time"],
    },
    {
        "id": "street-fighter-2-1991",
        "title": "Street Fighter II",
        "year": 1991,
        "platforms": ["Arcade", "SNES"],
        "genres": ["Fighting"],
        "tags": ["versus", "combat"],
    },
    {
        "id": "civilization-1991",
        "title": "Sid Meier's Civilization",
        "year": 1991,
        "platforms": ["Amiga"],
        "genres": ["Strategy", "Simulation"],
        "tags": ["turn based", "resource management", "procedural generation"],
    },
    {
        "id": "super-mario-bros-1985",
        "title": "Super Mario Bros.",
        "year": 1985,
        "platforms": ["NES"],
        "genres": ["Platform"],
        "tags": ["platform jumping", "collection", "time pressure", "co-op"],
    },
    {
        "id": "pac-man-1980",
        "title": "Pac-Man",
        "year": 1980,
        "platforms": ["Arcade"],
        "genres": ["Action", "Puzzle"],
        "tags": ["real-time", "collection"],
    },
    {
        "id": "out-run-1986",
        "title": "Out Run",
        "year": 1986,
        "platforms": ["Arcade"],
        "genres": ["Racing"],
        "tags": ["timer", "real-time"],
    },
    {
        "id": "alone-in-the-dark-1992",
        "title": "Alone in the Dark",
        "year": 1992,
        "platforms": ["PC"],
        "genres": ["survival horror", "Adventure"],
        "tags": ["puzzles", "exploration", "stealth"],
    },
]
