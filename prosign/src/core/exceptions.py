""" Errors raised by the resigning pipeline """


class ResignError(Exception):
    """ superclass for any reason why a resign job failed """
    pass


class ArchiveError(ResignError):
    """ thrown if an archive can't be read or written """
    pass


class InvalidArchiveLayout(ResignError):
    """ the extracted archive doesn't look like an IPA """
    pass


class PayloadNotFoundError(InvalidArchiveLayout):
    """ thrown if the extracted archive has no Payload directory """
    pass


class BundleNotFoundError(InvalidArchiveLayout):
    """ thrown if Payload holds no .app bundle """
    pass


class SigningError(ResignError):
    """ the signing primitive reported a failure """
    pass


class ConfigError(ValueError):
    """ thrown if the configuration file can't be loaded """
    pass
