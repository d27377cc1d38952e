#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Compose an SVG layout spread into a fillable PDF page.
"""

# local repo modules
import spread_layout.cli


if __name__ == "__main__":
	spread_layout.cli.main()
