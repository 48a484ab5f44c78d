"""
Printerface exceptions.

.. autoclass:: PrinterfaceException

.. autoclass:: ProtocolError
   :show-inheritance:

.. autoclass:: TransportError
   :show-inheritance:

.. autoclass:: ConfigurationError
   :show-inheritance:

"""

__license__ = "GNU Affero General Public License http://www.gnu.org/licenses/agpl.html"
__copyright__ = "Copyright (C) 2024 The Printerface Project - Released under terms of the AGPLv3 License"


class PrinterfaceException(Exception):
    """
    Base exception of all printerface related exceptions.
    """

    def __init__(self, message, cause=None):
        self.cause = cause
        Exception.__init__(self, message)

    def __str__(self):
        result = Exception.__str__(self)
        if self.cause:
            return "{}: {}".format(result, str(self.cause))
        else:
            return result


class ProtocolError(PrinterfaceException):
    """
    Raised if the server answered with data that doesn't have the expected shape,
    e.g. a body that is no valid JSON or a job response without a ``job`` entry.
    """

    pass


class TransportError(PrinterfaceException):
    """
    Raised if a request against the server failed on the transport level.

    .. attribute:: status_code

       HTTP status code of the failed request, ``None`` if the request didn't
       produce a response at all (connection refused, timeout, ...).
    """

    def __init__(self, message, status_code=None, cause=None):
        PrinterfaceException.__init__(self, message, cause=cause)
        self.status_code = status_code


class ConfigurationError(PrinterfaceException):
    """
    Raised if the client configuration could not be loaded or is invalid.
    """

    pass
