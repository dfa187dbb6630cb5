"""
Party system and voter turnout maps.

Joins a per-country party system classification and a voter turnout table
onto world boundaries, then renders an interactive choropleth and a bar
chart of average turnout per party system.
"""

__version__ = "0.1.0"
