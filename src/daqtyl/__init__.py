"""
Parametric generator for a split, tented, concave columnar keyboard case.
"""
