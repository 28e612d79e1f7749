from onair.tui.screens.spot_stats import SpotStatsScreen

__all__ = [
    "SpotStatsScreen",
]
