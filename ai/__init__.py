"""
ai package – Online-learning opponent controller.

Modules:
    ai_core          – ControllerContext + OpponentBrain, the per-tick orchestrator
    neural_network   – 8-16-4 feed-forward net with backprop-with-momentum
    training         – Sample buffer, heuristic labeler, online trainer
    behavior         – Mode state machine (dash / beam windups, speed boost)
    snapshot         – World snapshot and the network's input vector
    ports            – Injectable clock and random sources
    stats            – Per-match accuracy / ability statistics
    persistence      – Optional save / load of network weights
"""
