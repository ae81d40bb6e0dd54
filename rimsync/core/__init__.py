"""
Core application engine for orchestrating a sync run.

The `SyncManager` decides, for every manifest item, whether to skip it, reuse
what SteamCMD already staged, or download it, and then places the result in
the mods folder.
"""
