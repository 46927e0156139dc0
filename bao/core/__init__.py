"""
Bao form core: the Form node type, constructors, cloning and the
canonical signature used for every structural comparison.
"""
