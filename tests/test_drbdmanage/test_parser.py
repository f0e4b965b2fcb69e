"""Tests for DRBD Manage output parsing."""

import pytest

from drbdflex.drbdmanage.errors import (
    CapacityCheckError,
    InsufficientSpaceError,
    InvalidRequestError,
    NotConvergedError,
    ProtocolError,
)
from drbdflex.drbdmanage.parser import (
    AssignmentState,
    assignments_converged,
    check_free_space,
    find_volume,
    is_diskless_client,
    minor_from_device,
    parse_assignment,
    parse_fs_type,
    parse_volumes,
    resource_exists,
    resource_name_for_minor,
    strip_output,
)

FREE_SPACE_OUT = "3136828,16760832\n"


class TestStripOutput:
    """Wrapper text stripping tests."""

    def test_prefix_and_suffix_parse_identically(self):
        """Test the banner is removed from either side."""
        payload = "res1,vol0,1048576,,,100,"
        prefixed = f"Operation completed successfully\n{payload}\n"
        suffixed = f"  {payload}\nOperation completed successfully\n"

        assert strip_output(prefixed) == payload
        assert strip_output(suffixed) == payload

    def test_bytes_input(self):
        """Test raw process output is decoded."""
        assert strip_output(b"  res1,x\n") == "res1,x"

    def test_banner_only(self):
        """Test output consisting only of the banner is empty."""
        assert strip_output("Operation completed successfully\n") == ""


class TestResourceExists:
    """Existence check tests."""

    def test_empty_output_does_not_exist(self):
        assert resource_exists("res1", "") is False
        assert resource_exists("res1", "  \n") is False

    def test_matching_name_exists(self):
        assert resource_exists("res1", "res1,7000,0,") is True

    def test_name_mismatch_is_protocol_error(self):
        """Test another resource's row is a protocol violation, not 'not found'."""
        with pytest.raises(ProtocolError):
            resource_exists("res1", "res2,7000,0,")


class TestAssignments:
    """Assignment convergence tests."""

    def test_converged_line(self):
        """Test identical current and target state."""
        assert assignments_converged("resA,node1,,connected,connected\n") is True

    def test_divergent_line_names_both_states(self):
        """Test divergence raises with both values."""
        with pytest.raises(NotConvergedError) as exc_info:
            assignments_converged("resA,node1,,connecting,connected\n")

        message = str(exc_info.value)
        assert "'connecting'" in message
        assert "'connected'" in message
        assert exc_info.value.current == "connecting"
        assert exc_info.value.target == "connected"

    def test_states_are_trimmed(self):
        assert assignments_converged("resA,node1,, connect|deploy ,connect|deploy") is True

    def test_empty_output_is_not_assigned(self):
        """Test no assignment is a plain False."""
        assert assignments_converged("") is False

    def test_all_lines_must_converge(self):
        """Test the first divergent line decides."""
        output = "\n".join(
            [
                "resA,node1,,connect|deploy,connect|deploy",
                "resA,node2,,connect,connect|deploy",
                "resA,node3,,connect|deploy,connect|deploy",
            ]
        )
        with pytest.raises(NotConvergedError):
            assignments_converged(output)

    def test_multiple_converged_lines(self):
        output = "resA,node1,,connect,connect\nresA,node2,,deploy,deploy\n"
        assert assignments_converged(output) is True

    def test_malformed_line_is_protocol_error(self):
        """Test wrong field count is fatal."""
        with pytest.raises(ProtocolError) as exc_info:
            assignments_converged("resA,node1,connected,connected")

        assert exc_info.value.raw == "resA,node1,connected,connected"

    def test_parse_assignment_fields(self):
        fact = parse_assignment("resA,node1,,connect|deploy,connect|deploy|diskless")

        assert fact.resource_name == "resA"
        assert fact.node_name == "node1"
        assert fact.current_state.flags == ("connect", "deploy")
        assert fact.converged is False
        assert fact.is_diskless_client is True

    def test_unrecognized_state_literal(self):
        """Test garbage in a state column is rejected."""
        with pytest.raises(ProtocolError):
            AssignmentState.parse("connect;deploy")

    def test_empty_state(self):
        assert AssignmentState.parse("  ").flags == ()


class TestDisklessClient:
    """Client-mode predicate tests."""

    def test_diskless_client(self):
        assert is_diskless_client("resA,node1,,connect|deploy|diskless,connect|deploy|diskless")

    def test_diskful_assignment(self):
        assert is_diskless_client("resA,node1,,connect|deploy,connect|deploy") is False

    def test_current_state_is_not_validated(self):
        """Test only the target state decides client mode."""
        assert is_diskless_client("res1,node1,,Connecting2,connect|deploy|diskless") is True
        assert is_diskless_client("res1,node1,,,connect|deploy|diskless\n") is True

    @pytest.mark.parametrize(
        "output",
        ["", "garbage", "resA,node1,connect|deploy|diskless", "resA,node1,,a,b\nresA,node2,,a,b"],
    )
    def test_irregular_output_is_not_client(self, output):
        """Test irregularities collapse to False."""
        assert is_diskless_client(output) is False


class TestVolumes:
    """Volume record tests."""

    def test_malformed_middle_line_is_skipped(self):
        """Test a 6-field line does not hide its neighbours."""
        output = "\n".join(
            [
                "res1,0,1048576,,,100,",
                "res2,0,1048576,,100,",
                "res3,0,2097152,,,102,",
            ]
        )

        assert [v.resource_name for v in parse_volumes(output)] == ["res1", "res3"]
        assert resource_name_for_minor(output, "100") == "res1"
        assert resource_name_for_minor(output, "102") == "res3"

    def test_no_match_is_empty(self):
        assert resource_name_for_minor("res1,0,1048576,,,100,", "999") == ""
        assert find_volume("res1,0,1048576,,,100,", resource_name="nope") is None

    def test_find_by_name(self):
        output = "res1,0,1048576,,,100,\nres3,0,2097152,,,102,"
        volume = find_volume(output, resource_name="res3")

        assert volume.minor == "102"
        assert volume.device_path == "/dev/drbd102"

    def test_non_numeric_minor(self):
        """Test a bad minor never becomes a device path."""
        volume = find_volume("res1,0,1048576,,,abc,", resource_name="res1")

        with pytest.raises(ProtocolError):
            volume.device_path


class TestMinorFromDevice:
    """Device path validation tests."""

    def test_drbd_device(self):
        assert minor_from_device("/dev/drbd100") == "100"

    @pytest.mark.parametrize("device", ["/dev/sda1", "/dev/drbd", "/dev/drbdX1", "drbd100"])
    def test_non_drbd_device(self, device):
        with pytest.raises(InvalidRequestError):
            minor_from_device(device)


class TestFreeSpace:
    """Free-space parsing tests."""

    def test_request_fits(self):
        assert check_free_space("5000", FREE_SPACE_OUT) == 3136828

    def test_request_too_large(self):
        """Test the error cites both quantities."""
        with pytest.raises(InsufficientSpaceError) as exc_info:
            check_free_space("50000000", FREE_SPACE_OUT)

        assert "50000000" in str(exc_info.value)
        assert "3136828" in str(exc_info.value)

    def test_exact_fit_is_refused(self):
        """Test requests that would exhaust capacity are rejected."""
        with pytest.raises(InsufficientSpaceError):
            check_free_space("3136828", FREE_SPACE_OUT)
        assert check_free_space("3136827", FREE_SPACE_OUT) == 3136828

    @pytest.mark.parametrize("requested", ["banana", "-40", "0", "3.14", "+5", "", "   ", "\n"])
    def test_invalid_request(self, requested):
        """Test validation fails regardless of the reported space."""
        for output in (FREE_SPACE_OUT, "Error: nope", "garbage"):
            with pytest.raises(InvalidRequestError):
                check_free_space(requested, output)

    def test_manager_error_surfaced_verbatim(self):
        output = "Error: Deployment node count exceeds the number of nodes in the cluster\n"

        with pytest.raises(CapacityCheckError) as exc_info:
            check_free_space("38967", output)

        assert str(exc_info.value) == output.strip()

    @pytest.mark.parametrize("output", ["", "lots,16760832", "-5,10"])
    def test_unparseable_output_fails_closed(self, output):
        with pytest.raises(CapacityCheckError):
            check_free_space("10", output)


class TestFilesystemType:
    """blkid output parsing tests."""

    def test_filesystem_found(self):
        output = "ID_FS_UUID=1234-abcd\nID_FS_UUID_ENC=1234-abcd\nID_FS_TYPE=ext4\n"
        assert parse_fs_type(output) == "ext4"

    def test_no_filesystem(self):
        """Test an unformatted device is not an error."""
        assert parse_fs_type("") == ""
        assert parse_fs_type(" \n") == ""

    def test_malformed_pair(self):
        with pytest.raises(ProtocolError):
            parse_fs_type("ID_FS_TYPE=ext4 garbage")

    def test_missing_type_key(self):
        with pytest.raises(ProtocolError):
            parse_fs_type("ID_FS_UUID=1234-abcd")
