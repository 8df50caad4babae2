"""Chess Crawl: rules and decision engine for a roguelike chess variant."""
