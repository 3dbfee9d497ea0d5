"""Query composition: turns UI state and actions into a remote-query descriptor."""
