"""
Core probe annotation logic, independent of any canvas or UI toolkit.
"""
