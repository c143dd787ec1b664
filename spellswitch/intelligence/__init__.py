"""Language resolution, classification, dictionaries and misspelling memoization."""
