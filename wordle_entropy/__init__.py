"""
Wordle Entropy Solver
=====================

Picks, every turn, the guess with the highest expected information about
the answer, weighting candidates by a sigmoid prior over word frequency.
Includes the precomputed pattern cache, a first-guess memo, and a batch
simulator with a grid search for the prior's parameters.
"""

__version__ = "1.0.0"

from .frequency import WordFrequencyModel
from .initial_guesses import InitialGuessesCache, compute_initial_guesses
from .optimizer import SigmoidOptimizer, coarse_grid, fine_grid
from .pattern_cache import PatternCache
from .patterns import LetterResult, Pattern, evaluate_guess, get_pattern
from .simulation import BatchSimulator, OptimizationResult, play_game
from .solver import WordleSolver, information_gained
from .words import load_words
