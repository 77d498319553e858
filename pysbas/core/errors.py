# Copyright 2024 inuex35
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Exception types raised by pysbas"""


class SBASError(Exception):
    """Base class for all pysbas errors"""


class DecodeError(SBASError, ValueError):
    """A broadcast message could not be decoded.

    Raised for malformed bit lengths, unknown message types and slot
    indices outside a table's range. Fatal for that message only.
    """

    def __init__(self, message, msg_type=None):
        super().__init__(message)
        self.msg_type = msg_type


class ConfigurationError(SBASError):
    """Invalid configuration, detected before any observation is processed"""
