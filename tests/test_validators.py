from wallet_mcp.tools import validators


def test_address_validation():
    assert validators.is_valid_address("0x4200000000000000000000000000000000000011")
    assert validators.is_valid_address("0xAbCdEf0123456789abcdef0123456789ABCDEF01")
    assert validators.is_valid_address("  0x4200000000000000000000000000000000000011 ")
    assert not validators.is_valid_address("4200000000000000000000000000000000000011")
    assert not validators.is_valid_address("0x42")
    assert not validators.is_valid_address("0xZZ00000000000000000000000000000000000011")
    assert not validators.is_valid_address(None)
    assert not validators.is_valid_address("")


def test_parse_limit():
    assert validators.parse_limit(None, default=10, max_value=100) == 10
    assert validators.parse_limit(5, default=10, max_value=100) == 5
    assert validators.parse_limit(100, default=10, max_value=100) == 100
    assert validators.parse_limit("7", default=10, max_value=100) == 7
    assert validators.parse_limit(4.0, default=10, max_value=100) == 4
    assert validators.parse_limit(0, default=10, max_value=100) is None
    assert validators.parse_limit(101, default=10, max_value=100) is None
    assert validators.parse_limit(False, default=10, max_value=100) is None
    assert validators.parse_limit("many", default=10, max_value=100) is None


def test_validate_address_tool():
    assert validators.validate_address("bad") == {"isValid": False}
    assert validators.validate_address("0x" + "1" * 40) == {"isValid": True}
