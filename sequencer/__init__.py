"""Reactive state, scheduling and screen-transition runtime."""
