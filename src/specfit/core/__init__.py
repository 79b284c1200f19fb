"""Core of specfit: signal containers, lineshapes, baselines and fitters."""
