"""Type aliases shared by the graph modules."""

# Opaque, totally ordered node identifier
NodeID = str
