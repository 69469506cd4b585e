"""Tests for the Pwned Passwords range query engine."""

import pytest

from pwnedkit.errors import (
    InvalidNTLMError,
    InvalidSHA1Error,
    NTLMLengthMismatchError,
    PrefixLengthMismatchError,
    SHA1LengthMismatchError,
    StreamReadError,
    UnsupportedHashModeError,
)
from pwnedkit.hibp.hashing import HashMode
from pwnedkit.hibp.models import Match
from pwnedkit.hibp.passwords import PwnedPassAPI, PwnedPasswordOptions

SHA1_TEST = "a94a8fe5ccb19ba61c4c0873d391e987982fbbd3"
NTLM_TEST = "0cb6948805f797bf2a82807973b89537"

SHA1_RANGE = [
    "FE5CCB19BA61C4C0873D391E987982FBBD3:76479",
    "0000000000000000000000000000000000A:2",
    "FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFF:0",
]

NTLM_RANGE = [
    "05F797BF2A82807973B89537000:0",
    "48805F797BF2A82807973B89530:1",
    "11111111111111111111111111A:1",
    "48805F797BF2A82807973B89537:42",
]


class SpyTransport:
    """Transport double that records calls and replays canned lines."""

    def __init__(self, lines=None, error=None):
        self.calls = []
        self.lines = list(lines or [])
        self.error = error

    def get_lines(self, url, params=None, headers=None):
        self.calls.append({"url": url, "params": params, "headers": headers})
        return self._iter()

    async def _iter(self):
        for line in self.lines:
            yield line
        if self.error is not None:
            raise self.error


def make_api(lines=None, error=None, **options) -> PwnedPassAPI:
    return PwnedPassAPI(
        SpyTransport(lines, error),
        PwnedPasswordOptions(**options),
        base_url="https://pwned.test",
    )


class TestListHashesPrefix:
    """Tests for the raw prefix listing."""

    @pytest.mark.asyncio
    async def test_two_line_range_body(self):
        body = "0000000000000000000000000000000000:1\n1111111111111111111111111111111111:2"
        api = make_api(body.split("\n"))

        matches = await api.list_hashes_prefix("a94a8")

        assert matches == [
            Match(hash="a94a80000000000000000000000000000000000", count=1, present=True),
            Match(hash="a94a81111111111111111111111111111111111", count=2, present=True),
        ]

    @pytest.mark.asyncio
    async def test_malformed_counts_dropped(self):
        api = make_api([
            "0000000000000000000000000000000000:1_000",
            "1111111111111111111111111111111111:+5",
            "2222222222222222222222222222222222:7",
        ])

        matches = await api.list_hashes_prefix("a94a8")
        assert [m.count for m in matches] == [7]

    @pytest.mark.asyncio
    async def test_builds_range_request(self):
        api = make_api(SHA1_RANGE)
        await api.list_hashes_prefix("A94A8")

        assert len(api.transport.calls) == 1
        call = api.transport.calls[0]
        assert call["url"] == "https://pwned.test/range/A94A8"
        assert call["params"] == {}
        assert call["headers"] is None

    @pytest.mark.asyncio
    async def test_hashes_share_prefix(self):
        api = make_api(SHA1_RANGE)
        matches = await api.list_hashes_prefix("A94A8")

        assert len(matches) == 2
        for match in matches:
            assert match.hash.startswith("a94a8")
            assert match.present

    @pytest.mark.asyncio
    @pytest.mark.parametrize("prefix", ["", "a94a", "a94a8f", SHA1_TEST])
    async def test_prefix_length_rejected_without_request(self, prefix):
        api = make_api(SHA1_RANGE)
        with pytest.raises(PrefixLengthMismatchError):
            await api.list_hashes_prefix(prefix)
        assert api.transport.calls == []

    @pytest.mark.asyncio
    async def test_ntlm_mode_param(self):
        api = make_api(NTLM_RANGE, hash_mode=HashMode.NTLM)
        await api.list_hashes_prefix("0cb69")
        assert api.transport.calls[0]["params"] == {"mode": "ntlm"}

    @pytest.mark.asyncio
    async def test_explicit_mode_overrides_options(self):
        api = make_api(NTLM_RANGE)
        await api.list_hashes_prefix("0cb69", HashMode.NTLM)
        assert api.transport.calls[0]["params"] == {"mode": "ntlm"}

    @pytest.mark.asyncio
    async def test_unknown_mode_falls_back_to_sha1(self):
        """Test that the prefix listing is lenient about the hash mode."""
        api = make_api(SHA1_RANGE, hash_mode="md5")
        matches = await api.list_hashes_prefix("a94a8")

        assert api.transport.calls[0]["params"] == {}
        assert len(matches) == 2

    @pytest.mark.asyncio
    async def test_padding_header(self):
        api = make_api(SHA1_RANGE, with_padding=True)
        await api.list_hashes_prefix("a94a8")
        assert api.transport.calls[0]["headers"] == {"Add-Padding": "true"}

    @pytest.mark.asyncio
    async def test_stream_error_discards_partial_results(self):
        api = make_api(SHA1_RANGE, error=StreamReadError("connection reset"))
        with pytest.raises(StreamReadError):
            await api.list_hashes_prefix("a94a8")

    @pytest.mark.asyncio
    async def test_empty_response(self):
        api = make_api([])
        assert await api.list_hashes_prefix("a94a8") == []

    def test_none_options_means_defaults(self):
        api = PwnedPassAPI(SpyTransport(), None)
        assert api.options == PwnedPasswordOptions()
        assert api.options.hash_mode is HashMode.SHA1
        assert api.options.with_padding is False


class TestCheckHashes:
    """Tests for exact hash checks."""

    @pytest.mark.asyncio
    async def test_check_sha1_found(self):
        api = make_api(SHA1_RANGE)
        match = await api.check_sha1(SHA1_TEST)

        assert match.present
        assert match.hash == SHA1_TEST
        assert match.count == 76479

    @pytest.mark.asyncio
    async def test_check_sha1_uppercase_input(self):
        api = make_api(SHA1_RANGE)
        match = await api.check_sha1(SHA1_TEST.upper())
        assert match.present
        assert match.hash == SHA1_TEST

    @pytest.mark.asyncio
    async def test_check_sha1_absent(self):
        api = make_api(SHA1_RANGE[1:])
        match = await api.check_sha1(SHA1_TEST)

        assert match == Match()
        assert not match.present
        assert match.count == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", ["", "abc", SHA1_TEST + "0"])
    async def test_check_sha1_length(self, value):
        api = make_api(SHA1_RANGE)
        with pytest.raises(SHA1LengthMismatchError):
            await api.check_sha1(value)
        assert api.transport.calls == []

    @pytest.mark.asyncio
    async def test_check_sha1_charset(self):
        api = make_api(SHA1_RANGE)
        with pytest.raises(InvalidSHA1Error):
            await api.check_sha1("x" * 40)
        assert api.transport.calls == []

    @pytest.mark.asyncio
    async def test_check_ntlm_found(self):
        api = make_api(NTLM_RANGE)
        match = await api.check_ntlm(NTLM_TEST)

        assert match.present
        assert match.hash == NTLM_TEST
        assert match.count == 42
        assert api.transport.calls[0]["url"].endswith("/range/0cb69")
        assert api.transport.calls[0]["params"] == {"mode": "ntlm"}

    @pytest.mark.asyncio
    async def test_check_ntlm_rejects_sha1(self):
        api = make_api(NTLM_RANGE)
        with pytest.raises(NTLMLengthMismatchError):
            await api.check_ntlm(SHA1_TEST)
        assert api.transport.calls == []

    @pytest.mark.asyncio
    async def test_check_ntlm_charset(self):
        api = make_api(NTLM_RANGE)
        with pytest.raises(InvalidNTLMError):
            await api.check_ntlm("g" * 32)

    @pytest.mark.asyncio
    async def test_specific_methods_keep_configured_mode(self):
        """Test that hash specific calls don't switch the generic mode."""
        api = make_api(NTLM_RANGE + SHA1_RANGE)
        await api.check_ntlm(NTLM_TEST)
        assert api.options.hash_mode is HashMode.SHA1

        await api.check_password("test")
        assert api.transport.calls[-1]["params"] == {}
        assert api.transport.calls[-1]["url"].endswith("/range/a94a8")


class TestGenericMethods:
    """Tests for password based methods using the configured mode."""

    @pytest.mark.asyncio
    async def test_check_password_sha1(self):
        api = make_api(SHA1_RANGE)
        match = await api.check_password("test")

        assert match.present
        assert match.count == 76479
        assert api.transport.calls[0]["url"].endswith("/range/a94a8")

    @pytest.mark.asyncio
    async def test_check_password_ntlm(self):
        api = make_api(NTLM_RANGE, hash_mode=HashMode.NTLM)
        match = await api.check_password("test")

        assert match.present
        assert match.hash == NTLM_TEST
        assert api.transport.calls[0]["params"] == {"mode": "ntlm"}

    @pytest.mark.asyncio
    async def test_check_password_unknown_mode(self):
        api = make_api(SHA1_RANGE, hash_mode="md5")
        with pytest.raises(UnsupportedHashModeError):
            await api.check_password("test")
        assert api.transport.calls == []

    @pytest.mark.asyncio
    async def test_list_hashes_password_unknown_mode(self):
        api = make_api(SHA1_RANGE, hash_mode="md5")
        with pytest.raises(UnsupportedHashModeError):
            await api.list_hashes_password("test")
        assert api.transport.calls == []

    @pytest.mark.asyncio
    async def test_list_hashes_password(self):
        api = make_api(SHA1_RANGE)
        matches = await api.list_hashes_password("test")
        assert [m.count for m in matches] == [76479, 2]

    @pytest.mark.asyncio
    async def test_list_hashes_sha1_and_ntlm(self):
        api = make_api(SHA1_RANGE)
        assert len(await api.list_hashes_sha1(SHA1_TEST)) == 2

        api = make_api(NTLM_RANGE)
        matches = await api.list_hashes_ntlm(NTLM_TEST)
        assert [m.count for m in matches] == [1, 1, 42]
        assert api.transport.calls[0]["params"] == {"mode": "ntlm"}

    @pytest.mark.asyncio
    async def test_list_hashes_sha1_invalid(self):
        api = make_api(SHA1_RANGE)
        with pytest.raises(InvalidSHA1Error):
            await api.list_hashes_sha1("q" * 40)
        with pytest.raises(SHA1LengthMismatchError):
            await api.list_hashes_sha1("abc")
        assert api.transport.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("mode", [HashMode.SHA1, HashMode.NTLM])
    async def test_check_password_lone_surrogate(self, mode):
        """Test that a password with a lone surrogate is hashed and queried."""
        api = make_api([], hash_mode=mode)

        match = await api.check_password("pass\ud800word")

        assert match == Match()
        assert len(api.transport.calls) == 1
