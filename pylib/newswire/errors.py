'''Exceptions raised by newswire.'''


class NewswireError(Exception):
    '''Base class for newswire errors.'''


class ConfigError(NewswireError):
    '''Raised at startup when configuration (env, sources file, provider) is invalid.'''


class GenerationError(NewswireError):
    '''Raised when a pipeline run produced nothing worth caching.'''
