"""
Analysis package: the map and chart renderers.

Both consume a JoinedDataset and never look at the parsed sources directly.
"""
