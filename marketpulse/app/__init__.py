"""Dashboard orchestration package for MarketPulse.

Contains controller-adjacent modules:
- services: late-bound story fetch and summary services
- filtering: topic filtering of the story list
- rendering: terminal list, badges and theme palettes
- controller: story board, refresh and summary controllers
"""

__all__ = ["controller", "filtering", "rendering", "services"]
