"""Perks Keeper - credit card reward offer tracker."""
