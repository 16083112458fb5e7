# -*- coding: utf-8 -*-
"""SnapCalorie core: virtual day clock, meal/water logging and goal arithmetic."""
