"""lullabot-project - AI development assistant setup for existing projects."""

__version__ = "1.0.0"
