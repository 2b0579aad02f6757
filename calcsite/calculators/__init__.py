"""
Calculation engine.

One class per calculator page. Each takes the submitted form fields and
returns a plain result dict. Pure Python math, no I/O.
"""
