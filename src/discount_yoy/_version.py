"""Version information for discount-yoy."""

VERSION = "0.1.0"
