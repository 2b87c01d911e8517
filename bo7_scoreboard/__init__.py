"""BO7 Scoreboard - Discord bot tracking best-of-7 results across Rocket League ranks."""

__version__ = "1.0.0"
