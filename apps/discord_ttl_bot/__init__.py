"""
Discord TTL bot package.

This package provides a one-shot Discord bot that deletes messages older
than a configured time to live from a fixed list of channels.
"""

def main():
    """Main entry point for the Discord TTL bot."""
    import sys
    from apps.discord_ttl_bot.ttl_bot import main as _main
    sys.exit(_main())

__all__ = ['main']
