"""LifeStream desktop client for the blood-donation coordination platform."""

__version__ = "0.4.0"
