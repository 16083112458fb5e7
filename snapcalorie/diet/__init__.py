# -*- coding: utf-8 -*-
"""Diet domain: meal estimation, meal/water logs and day/period summaries."""
