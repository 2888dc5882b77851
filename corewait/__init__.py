from corewait.poller import PollConfig, poll
from corewait.wait import Endpoints, wait_for_stack, wait_rest_healthy
