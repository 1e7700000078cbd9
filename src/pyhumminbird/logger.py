import logging

log = logging.getLogger('pyhumminbird')
