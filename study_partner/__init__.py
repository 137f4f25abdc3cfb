"""Study Partner: turn a photographed page into a solution, grade, transcript, or flashcards."""

__version__ = "0.1.0"
