"""
NumPy-backed implementation: the CPU device and its kernels, tensors with
their tapes and gradients, differentiable operations, modules and updaters.
"""
