from config import server_options


def test_debug_is_off_by_default():
    options = server_options({})
    assert options == {'host': '0.0.0.0', 'port': 3000, 'debug': False, 'allow_unsafe_werkzeug': False}


def test_debug_server_is_opt_in():
    options = server_options({'FLASK_DEBUG': '1', 'HOST': '127.0.0.1', 'PORT': '5050'})
    assert options['debug'] is True
    assert options['allow_unsafe_werkzeug'] is True
    assert (options['host'], options['port']) == ('127.0.0.1', 5050)
