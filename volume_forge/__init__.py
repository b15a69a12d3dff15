"""Volume Forge placeholder data generator package."""
