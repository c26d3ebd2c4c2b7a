# Copyright 2025 Google LLC
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
# ==============================================================================

# Document store collections
WORKSHOPS_COLLECTION = "workshops"
SUBMISSIONS_COLLECTION = "submissions"
DRAFTS_COLLECTION = "drafts"
SETTINGS_COLLECTION = "settings"

ACTIVE_CERTIFICATE_TEMPLATE_KEY = "activeCertificateTemplate"
CERTIFICATE_TEMPLATES_PREFIX = "certificate-templates/"
MAX_CERTIFICATE_TEMPLATE_BYTES = 5 * 1024 * 1024

UNIQUE_LINK_LENGTH = 16
MAX_WORKSHOP_NAME_LENGTH = 100
MAX_FEEDBACK_LENGTH = 4000

VERIFICATION_CODE_LENGTH = 6
DEFAULT_COOLDOWN_SECONDS = 60
