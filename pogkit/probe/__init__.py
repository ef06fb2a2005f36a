"""
**PROBE**

A library to **probe** constructed partial order graphs, intended for
inspecting and exchanging graphs outside of the library.

This includes tools for
- DOT export and re-import
- networkx conversion and plotting.
"""
