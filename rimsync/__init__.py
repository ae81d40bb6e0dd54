"""
rimsync: keeps a RimWorld mods folder in sync with a list of Steam Workshop items,
downloading them through SteamCMD.
"""

__version__ = "0.1.0"
