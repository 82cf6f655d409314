"""Unit tests for InkModeler

Run with ``python -m unittest discover tests`` from the top of the
source tree.

"""
