import logging
import os
import sys


class CustomExtraLogAdapter(logging.LoggerAdapter):
    def process(self, msg, kwargs):
        shop_context = kwargs.pop("extra", self.extra["extra"])
        return "[%s] %s" % (shop_context, msg), kwargs


def get_logger(name, level=logging.DEBUG) -> logging.LoggerAdapter:

    FORMAT = "[%(levelname)s  %(name)s %(module)s:%(lineno)s - %(funcName)s() - %(asctime)s]\n\t %(message)s \n"
    TIME_FORMAT = "%d.%m.%Y %I:%M:%S %p"
    FILENAME = os.getenv("LOG_FILE", "./logger/log.log")

    log_dir = os.path.dirname(FILENAME)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logging.basicConfig(
        format=FORMAT, datefmt=TIME_FORMAT, level=level, filename=FILENAME
    )

    logger_instance = logging.getLogger(name)

    # module reloads must not stack duplicate stdout handlers
    if not logger_instance.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        logger_instance.addHandler(handler)

    return CustomExtraLogAdapter(logger_instance, {"extra": None})


logger = get_logger(__name__)
