"""Match configuration file loading."""
