"""
Workload Placement Simulator

Monte Carlo engine for exploring where workloads originate and where they
end up executing across a fixed set of locations (public cloud through to
the functional edge and end-user PCs).
"""

__version__ = "0.1.0"
