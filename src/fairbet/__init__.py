"""FairBet: fair-odds and expected-value computation for sportsbook prices."""

__version__ = "0.1.0"
