import logging

from logging_config import ColorfulFormatter, default_level, get_colorful_logger


def test_get_colorful_logger_returns_logger():
    logger = get_colorful_logger("test-logger")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "test-logger"


def test_get_colorful_logger_no_duplicate_handlers():
    logger = get_colorful_logger("dup-logger")
    n = len(logger.handlers)
    logger2 = get_colorful_logger("dup-logger")
    assert logger2 is logger
    assert len(logger2.handlers) == n


def test_plain_streamhandler_formatting(monkeypatch, capsys):
    """
    LOG_RICH=0 时应使用 StreamHandler + ColorfulFormatter，
    并输出包含分隔符与 ANSI 颜色码的日志。
    """
    import logging_config as lc
    monkeypatch.setattr(lc, "RICH_ENABLED", False)

    logger = get_colorful_logger("lg-plain-1")
    assert len(logger.handlers) == 1
    handler = logger.handlers[0]
    assert isinstance(handler, logging.StreamHandler)
    assert isinstance(handler.formatter, ColorfulFormatter)

    logger.info("hello-plain")
    out = capsys.readouterr().out
    assert "hello-plain" in out
    assert " | " in out  # 时间 | 等级 | 名称 | 消息
    assert "\x1b[" in out


def test_logger_level_controls_output(monkeypatch, capsys):
    import logging_config as lc
    monkeypatch.setattr(lc, "RICH_ENABLED", False)

    logger = get_colorful_logger("lg-level-1")
    logger.setLevel(logging.WARNING)
    for h in logger.handlers:
        h.setLevel(logging.WARNING)

    _ = capsys.readouterr()
    logger.info("info-msg")
    logger.warning("warn-msg")
    captured = capsys.readouterr().out

    assert "info-msg" not in captured
    assert "warn-msg" in captured


def test_rich_handler_used_by_default(monkeypatch):
    import logging_config as lc
    from rich.logging import RichHandler

    monkeypatch.setattr(lc, "RICH_ENABLED", True)
    logger = get_colorful_logger("lg-rich-1")
    assert len(logger.handlers) == 1
    handler = logger.handlers[0]
    assert isinstance(handler, RichHandler)
    assert handler.formatter._fmt == "%(message)s"


def test_default_level_from_env(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert default_level() == logging.DEBUG
    monkeypatch.setenv("LOG_LEVEL", "nonsense")
    assert default_level() == logging.INFO


def test_colorful_formatter_paints_name_and_level_only():
    fmt = ColorfulFormatter('%(asctime)s | %(levelname)s | %(name)s | %(message)s', datefmt='%H:%M:%S')
    record = logging.LogRecord("auth.flow", logging.WARNING, __file__, 1, "INFO in message", None, None)

    out = fmt.format(record)
    assert f"{ColorfulFormatter.NAME_COLOR}auth.flow{ColorfulFormatter.RESET}" in out
    assert f"{ColorfulFormatter.LEVEL_COLORS[logging.WARNING]}WARNING{ColorfulFormatter.RESET}" in out
    assert out.endswith("| INFO in message")
    # 原始 record 不被修改
    assert record.levelname == "WARNING"
    assert record.name == "auth.flow"
