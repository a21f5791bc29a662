"""
Shared Kernel

Base classes and utilities shared by the quote, inventory and booking contexts:
domain building blocks, the error taxonomy, the unit of work and the message bus.
"""
