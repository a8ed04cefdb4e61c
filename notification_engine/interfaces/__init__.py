"""Interface adapters exposing the engine to the outside world."""
